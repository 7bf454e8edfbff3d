from django.core.exceptions import ValidationError
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.fees.models import FeeStructure, PaymentRecord
from apps.core.fees.services import fee_line_balance, student_balance, student_summary
from apps.core.recycle_bin.services import soft_delete_student
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.users.models import User
from apps.core.utils.http import form_error_response, model_payload, validation_error_response

from .forms import SchoolClassForm, StudentForm
from .models import Student
from .services import (
    add_class,
    create_student,
    delete_class,
    list_classes,
    list_students,
    update_student,
)

STAFF_ROLES = [User.ROLE_ADMIN, User.ROLE_EMPLOYEE]


def _current_session(request):
    if request.current_session is None:
        raise Http404('No current session is configured.')
    return request.current_session


def _can_read_student(user, student_id):
    if user.role in STAFF_ROLES:
        return True
    return user.role == User.ROLE_STUDENT and user.student_id == student_id


@role_required(STAFF_ROLES)
@require_GET
def student_list(request):
    session = _current_session(request)
    students = list_students(
        session,
        grade=request.GET.get('grade'),
        search=request.GET.get('q', ''),
    )

    fee_ids = {fee_id for student in students for fee_id in student.fee_structure_ids}
    fee_structures = {fee.id: fee for fee in FeeStructure.objects.filter(id__in=fee_ids)}
    payments = list(PaymentRecord.objects.filter(student_id__in=[student.id for student in students]))

    return JsonResponse({
        'session': session.name,
        'students': [
            model_payload(student, summary=student_summary(student, fee_structures, payments))
            for student in students
        ],
    })


@role_required(STAFF_ROLES)
@require_POST
def student_create(request):
    session = _current_session(request)
    form = StudentForm(request.POST, session=session)
    if not form.is_valid():
        return form_error_response(form)

    try:
        student = create_student(session=session, **form.cleaned_data)
    except ValidationError as exc:
        return validation_error_response(exc)

    log_audit_event(
        request=request,
        action='students.student_created',
        target=student,
        details=f"Name={student.name}, Grade={student.grade}",
    )
    return JsonResponse(model_payload(student), status=201)


@role_required(STAFF_ROLES)
@require_POST
def student_update(request, student_id):
    student = get_object_or_404(Student, pk=student_id)
    form = StudentForm(request.POST, instance=student)
    if not form.is_valid():
        return form_error_response(form)

    try:
        student = update_student(form.save(commit=False))
    except ValidationError as exc:
        return validation_error_response(exc)
    if student is None:
        raise Http404('Student not found.')

    log_audit_event(
        request=request,
        action='students.student_updated',
        target=student,
        details=f"Name={student.name}, Grade={student.grade}",
    )
    return JsonResponse(model_payload(student))


@role_required(User.ROLE_ADMIN)
@require_POST
def student_delete(request, student_id):
    item = soft_delete_student(student_id)
    if item is None:
        raise Http404('Student not found.')

    log_audit_event(
        request=request,
        action='students.student_deleted',
        target=item,
        details=item.description,
    )
    return JsonResponse({'trash_id': item.id, 'description': item.description})


@role_required([User.ROLE_ADMIN, User.ROLE_EMPLOYEE, User.ROLE_STUDENT])
@require_GET
def student_balance_detail(request, student_id):
    if not _can_read_student(request.user, student_id):
        return JsonResponse({'error': 'You do not have access to this operation.'}, status=403)

    return JsonResponse({'student_id': student_id, **student_balance(student_id)})


@role_required([User.ROLE_ADMIN, User.ROLE_EMPLOYEE, User.ROLE_STUDENT])
@require_GET
def fee_line_balance_detail(request, student_id, fee_id):
    if not _can_read_student(request.user, student_id):
        return JsonResponse({'error': 'You do not have access to this operation.'}, status=403)

    return JsonResponse({
        'student_id': student_id,
        'fee_structure_id': fee_id,
        **fee_line_balance(student_id, fee_id),
    })


@role_required(STAFF_ROLES)
@require_GET
def class_list(request):
    return JsonResponse({'classes': list_classes()})


@role_required(User.ROLE_ADMIN)
@require_POST
def class_create(request):
    form = SchoolClassForm(request.POST)
    if not form.is_valid():
        return form_error_response(form)

    school_class = add_class(form.cleaned_data['name'])
    log_audit_event(request=request, action='students.class_added', target=school_class)
    return JsonResponse({'classes': list_classes()}, status=201)


@role_required(User.ROLE_ADMIN)
@require_POST
def class_delete(request, name):
    if not delete_class(name):
        raise Http404('Class not found.')

    log_audit_event(request=request, action='students.class_removed', details=f"Name={name}")
    return JsonResponse({'classes': list_classes()})
