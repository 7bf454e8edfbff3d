from django.http import JsonResponse
from django.forms.models import model_to_dict


def model_payload(instance, **extra):
    payload = model_to_dict(instance)
    payload['id'] = instance.pk
    payload.update(extra)
    return payload


def validation_error_response(error, status=400):
    return JsonResponse({
        'error': ' '.join(error.messages),
        'code': getattr(error, 'code', None),
        'details': getattr(error, 'params', None) or {},
    }, status=status)


def form_error_response(form, status=400):
    return JsonResponse({'errors': form.errors}, status=status)
