from django import forms

from .models import FeeStructure, PaymentRecord


class FeeStructureForm(forms.ModelForm):
    class Meta:
        model = FeeStructure
        fields = ['name', 'amount', 'due_date']


class PaymentRecordForm(forms.ModelForm):
    date = forms.DateField(required=False)
    method = forms.ChoiceField(choices=PaymentRecord.METHOD_CHOICES, required=False)

    class Meta:
        model = PaymentRecord
        fields = ['student', 'fee_structure', 'amount_paid', 'date', 'method']

    # Blank date or method keeps the stored value on edit; new payments get the model defaults.
    def clean_date(self):
        return self.cleaned_data.get('date') or self.instance.date

    def clean_method(self):
        return self.cleaned_data.get('method') or self.instance.method or PaymentRecord.METHOD_CASH


class PaymentFilterForm(forms.Form):
    student = forms.CharField(required=False)
    start_date = forms.DateField(required=False)
    end_date = forms.DateField(required=False)
    q = forms.CharField(required=False)
