from django.core.exceptions import ValidationError
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.recycle_bin.services import soft_delete_expense
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.users.models import User
from apps.core.utils.http import form_error_response, model_payload, validation_error_response

from .forms import ExpenseFilterForm, ExpenseForm
from .models import Expense
from .services import (
    aggregate_expense_stats,
    create_expense,
    expense_totals_by_category,
    filter_expenses,
    list_expenses,
    update_expense,
)

STAFF_ROLES = [User.ROLE_ADMIN, User.ROLE_EMPLOYEE]


def _current_session(request):
    if request.current_session is None:
        raise Http404('No current session is configured.')
    return request.current_session


@role_required(STAFF_ROLES)
@require_GET
def expense_list(request):
    session = _current_session(request)
    form = ExpenseFilterForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)

    rows = filter_expenses(
        list_expenses(session),
        category=form.cleaned_data['category'],
        start_date=form.cleaned_data['start_date'],
        end_date=form.cleaned_data['end_date'],
        search=form.cleaned_data['q'],
    )
    return JsonResponse({
        'session': session.name,
        'stats': aggregate_expense_stats(rows),
        'by_category': expense_totals_by_category(rows),
        'expenses': [model_payload(expense, category_label=expense.get_category_display()) for expense in rows],
    })


@role_required(STAFF_ROLES)
@require_POST
def expense_create(request):
    session = _current_session(request)
    form = ExpenseForm(request.POST)
    if not form.is_valid():
        return form_error_response(form)

    try:
        expense = create_expense(
            session=session,
            category=form.cleaned_data['category'],
            description=form.cleaned_data['description'],
            amount=form.cleaned_data['amount'],
            expense_date=form.cleaned_data['date'],
        )
    except ValidationError as exc:
        return validation_error_response(exc)

    log_audit_event(
        request=request,
        action='expenses.expense_recorded',
        target=expense,
        details=f"Category={expense.category}, Amount={expense.amount}",
    )
    return JsonResponse(model_payload(expense), status=201)


@role_required(STAFF_ROLES)
@require_POST
def expense_update(request, expense_id):
    expense = get_object_or_404(Expense, pk=expense_id)
    form = ExpenseForm(request.POST, instance=expense)
    if not form.is_valid():
        return form_error_response(form)

    try:
        expense = update_expense(form.save(commit=False))
    except ValidationError as exc:
        return validation_error_response(exc)
    if expense is None:
        raise Http404('Expense not found.')

    log_audit_event(
        request=request,
        action='expenses.expense_updated',
        target=expense,
        details=f"Category={expense.category}, Amount={expense.amount}",
    )
    return JsonResponse(model_payload(expense))


@role_required(STAFF_ROLES)
@require_POST
def expense_delete(request, expense_id):
    item = soft_delete_expense(expense_id)
    if item is None:
        raise Http404('Expense not found.')

    log_audit_event(
        request=request,
        action='expenses.expense_deleted',
        target=item,
        details=item.description,
    )
    return JsonResponse({'trash_id': item.id, 'description': item.description})
