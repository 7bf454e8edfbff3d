from django import forms

from apps.core.fees.models import FeeStructure

from .models import SchoolClass, Student


class StudentForm(forms.ModelForm):
    # Submission order is kept: the first id is the primary fee line.
    fee_structure_ids = forms.MultipleChoiceField(required=False)
    back_fees = forms.DecimalField(max_digits=12, decimal_places=2, required=False)

    class Meta:
        model = Student
        fields = [
            'name',
            'grade',
            'parent_name',
            'contact',
            'address',
            'date_of_birth',
            'admission_date',
            'avatar',
            'fee_structure_ids',
            'total_class_fees',
            'back_fees',
        ]

    def __init__(self, *args, **kwargs):
        self.session = kwargs.pop('session', None)
        super().__init__(*args, **kwargs)

        fee_structures = FeeStructure.objects.all()
        session = self.session or (self.instance.session if self.instance.session_id else None)
        if session is not None:
            fee_structures = fee_structures.for_session(session)
        self.fields['fee_structure_ids'].choices = [(fee.id, fee.name) for fee in fee_structures]

    def clean_back_fees(self):
        return self.cleaned_data.get('back_fees') or 0


class SchoolClassForm(forms.ModelForm):
    class Meta:
        model = SchoolClass
        fields = ['name']
