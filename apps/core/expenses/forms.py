from django import forms

from .models import Expense


class ExpenseForm(forms.ModelForm):
    date = forms.DateField(required=False)

    class Meta:
        model = Expense
        fields = ['category', 'description', 'amount', 'date']

    def clean_date(self):
        return self.cleaned_data.get('date') or self.instance.date


class ExpenseFilterForm(forms.Form):
    category = forms.CharField(required=False)
    start_date = forms.DateField(required=False)
    end_date = forms.DateField(required=False)
    q = forms.CharField(required=False)
