from django.core.exceptions import ValidationError
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.recycle_bin.services import soft_delete_payment
from apps.core.students.models import Student
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.users.models import User
from apps.core.utils.http import form_error_response, model_payload, validation_error_response

from .forms import FeeStructureForm, PaymentFilterForm, PaymentRecordForm
from .models import PaymentRecord
from .services import (
    aggregate_collection_stats,
    create_fee_structure,
    create_payment,
    filter_payments,
    list_fee_structures,
    list_payments,
    update_payment,
)

STAFF_ROLES = [User.ROLE_ADMIN, User.ROLE_EMPLOYEE]


def _current_session(request):
    if request.current_session is None:
        raise Http404('No current session is configured.')
    return request.current_session


@role_required(STAFF_ROLES)
@require_GET
def fee_structure_list(request):
    session = _current_session(request)
    return JsonResponse({
        'session': session.name,
        'fee_structures': [model_payload(fee) for fee in list_fee_structures(session)],
    })


@role_required(User.ROLE_ADMIN)
@require_POST
def fee_structure_create(request):
    session = _current_session(request)
    form = FeeStructureForm(request.POST)
    if not form.is_valid():
        return form_error_response(form)

    try:
        fee = create_fee_structure(session=session, **form.cleaned_data)
    except ValidationError as exc:
        return validation_error_response(exc)

    log_audit_event(
        request=request,
        action='fees.fee_structure_created',
        target=fee,
        details=f"Name={fee.name}, Amount={fee.amount}",
    )
    return JsonResponse(model_payload(fee), status=201)


@role_required(STAFF_ROLES)
@require_GET
def payment_list(request):
    session = _current_session(request)
    form = PaymentFilterForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)

    students = {
        student.id: student.name
        for student in Student.objects.for_session(session).only('id', 'name')
    }
    rows = filter_payments(
        list_payments(session),
        students=students,
        student_id=form.cleaned_data['student'],
        start_date=form.cleaned_data['start_date'],
        end_date=form.cleaned_data['end_date'],
        search=form.cleaned_data['q'],
    )
    return JsonResponse({
        'session': session.name,
        'stats': aggregate_collection_stats(rows),
        'payments': [
            model_payload(payment, student_name=students.get(payment.student_id, 'Unknown Student'))
            for payment in rows
        ],
    })


@role_required(STAFF_ROLES)
@require_POST
def payment_create(request):
    form = PaymentRecordForm(request.POST)
    if not form.is_valid():
        return form_error_response(form)

    try:
        payment = create_payment(
            student=form.cleaned_data['student'],
            fee_structure=form.cleaned_data['fee_structure'],
            amount_paid=form.cleaned_data['amount_paid'],
            method=form.cleaned_data['method'],
            payment_date=form.cleaned_data['date'],
        )
    except ValidationError as exc:
        return validation_error_response(exc)

    log_audit_event(
        request=request,
        action='fees.payment_recorded',
        target=payment,
        details=f"Student={payment.student_id}, Amount={payment.amount_paid}, Method={payment.method}",
    )
    return JsonResponse(model_payload(payment), status=201)


@role_required(STAFF_ROLES)
@require_POST
def payment_update(request, payment_id):
    payment = get_object_or_404(PaymentRecord, pk=payment_id)
    form = PaymentRecordForm(request.POST, instance=payment)
    if not form.is_valid():
        return form_error_response(form)

    try:
        payment = update_payment(form.save(commit=False))
    except ValidationError as exc:
        return validation_error_response(exc)
    if payment is None:
        raise Http404('Payment not found.')

    log_audit_event(
        request=request,
        action='fees.payment_updated',
        target=payment,
        details=f"Amount={payment.amount_paid}, Method={payment.method}",
    )
    return JsonResponse(model_payload(payment))


@role_required(STAFF_ROLES)
@require_POST
def payment_delete(request, payment_id):
    item = soft_delete_payment(payment_id)
    if item is None:
        raise Http404('Payment not found.')

    log_audit_event(
        request=request,
        action='fees.payment_deleted',
        target=item,
        details=item.description,
    )
    return JsonResponse({'trash_id': item.id, 'description': item.description})
