from django import forms


class SessionNameForm(forms.Form):
    name = forms.CharField(max_length=40, required=False)
