from django.http import Http404, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.users.models import User

from .models import TrashItem
from .services import list_trash, permanent_delete_trash_item, restore_trash_item


@role_required(User.ROLE_ADMIN)
@require_GET
def trash_list(request):
    item_type = request.GET.get('type')
    items = list_trash(item_type)
    return JsonResponse({
        'items': [
            {
                'id': item.id,
                'type': item.item_type,
                'original_id': item.original_id,
                'description': item.description,
                'deleted_at': item.deleted_at,
            }
            for item in items
        ],
    })


@role_required(User.ROLE_ADMIN)
@require_POST
def trash_restore(request, trash_id):
    item = TrashItem.objects.filter(pk=trash_id).first()
    if item is None:
        raise Http404('Trash item not found.')

    if not restore_trash_item(trash_id):
        return JsonResponse({
            'error': 'The item could not be restored. Its id is in use again or its session was deleted.',
            'code': 'restore_rejected',
        }, status=409)

    log_audit_event(
        request=request,
        action='recycle_bin.item_restored',
        details=f"{item.item_type} {item.original_id}: {item.description}",
    )
    return JsonResponse({'restored': True, 'type': item.item_type, 'original_id': item.original_id})


@role_required(User.ROLE_ADMIN)
@require_POST
def trash_delete(request, trash_id):
    deleted = permanent_delete_trash_item(trash_id)
    if deleted:
        log_audit_event(
            request=request,
            action='recycle_bin.item_purged',
            details=f"Trash={trash_id}",
        )
    return JsonResponse({'deleted': deleted})
