"""
Replay of operations queued by a client while it was offline.

A client that loses connectivity keeps create/update/delete operations in a
local queue and posts the whole queue once it is back online. Operations are
applied in order, each in its own transaction, so one bad item never blocks
the rest. There is no conflict resolution: the last write wins.

Records created offline carry a temporary id (``offline_<timestamp>``).
Later operations in the same batch may reference that id; it is resolved to
the id of the record the earlier create produced.
"""

import logging

from django.utils import timezone

from .exceptions import PropertiesServiceError, SyncOperationError
from .property_management import create_property, update_property, delete_property

logger = logging.getLogger(__name__)

OFFLINE_ID_PREFIX = 'offline_'
SYNC_OPERATION_TYPES = ('create', 'update', 'delete')


def is_offline_id(value) -> bool:
    return isinstance(value, str) and value.startswith(OFFLINE_ID_PREFIX)


def _resolve_target_id(data: dict, id_map: dict):
    target = data.get('id')
    if target in (None, ''):
        raise SyncOperationError("Operação sem ID do imóvel")
    if is_offline_id(target):
        if target not in id_map:
            raise SyncOperationError(f"Registro offline {target} não sincronizado")
        return id_map[target]
    try:
        return int(target)
    except (TypeError, ValueError):
        raise SyncOperationError(f"ID de imóvel inválido: {target}")


def apply_sync_operations(*, user, operations: list) -> dict:
    """
    Apply queued offline operations for user.

    Args:
        user: Owner of every touched record
        operations: Dicts with ``type``, ``data`` and optional ``client_id``

    Returns:
        Summary dict with ``synced``, ``failed``, per-item ``results`` and
        ``last_sync`` (ISO timestamp)
    """
    id_map = {}
    results = []
    synced = failed = 0

    for index, operation in enumerate(operations):
        op_type = operation.get('type')
        data = dict(operation.get('data') or {})
        client_id = operation.get('client_id') or (data.get('id') if is_offline_id(data.get('id')) else None)
        result = {'index': index, 'type': op_type}
        if client_id:
            result['client_id'] = client_id

        try:
            if op_type == 'create':
                instance = create_property(user=user, data=data)
                if client_id:
                    id_map[client_id] = instance.id
                result['id'] = instance.id
            elif op_type == 'update':
                target_id = _resolve_target_id(data, id_map)
                instance = update_property(property_id=target_id, user=user, data=data)
                result['id'] = instance.id
            elif op_type == 'delete':
                target_id = _resolve_target_id(data, id_map)
                delete_property(property_id=target_id, user=user)
                result['id'] = target_id
            else:
                raise SyncOperationError(
                    f"Tipo de operação desconhecido: {op_type}. "
                    f"Use um destes: {', '.join(SYNC_OPERATION_TYPES)}"
                )
        except PropertiesServiceError as e:
            logger.warning("Sync operation %d (%s) failed for user %s: %s", index, op_type, user.id, e)
            result.update(status='error', error=str(e))
            failed += 1
        else:
            result['status'] = 'ok'
            synced += 1

        results.append(result)

    logger.info("Offline sync for user %s: %d synced, %d failed", user.id, synced, failed)

    return {
        'synced': synced,
        'failed': failed,
        'results': results,
        'last_sync': timezone.now().isoformat(),
    }
