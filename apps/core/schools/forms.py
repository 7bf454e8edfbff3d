from django import forms

from .models import SchoolProfile
from .services import PROFILE_FIELDS


class SchoolProfileForm(forms.ModelForm):
    class Meta:
        model = SchoolProfile
        fields = list(PROFILE_FIELDS)

    def clean_slider_images(self):
        images = self.cleaned_data.get('slider_images') or []
        if not isinstance(images, list):
            raise forms.ValidationError('Slider images must be a list.')
        return images
