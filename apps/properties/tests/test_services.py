import pytest
from decimal import Decimal
from apps.properties.models import RuralProperty
from apps.properties.services import (
    create_property,
    update_property,
    delete_property,
    find_duplicate,
    apply_sync_operations,
    PropertyNotFoundError,
    InvalidPropertyDataError,
    DuplicatePropertyError,
)
from apps.properties.services.property_management import prepare_property_data


# =============================================================================
# Property Management Tests
# =============================================================================

class TestPreparePropertyData:

    def test_drops_unknown_fields_and_normalizes(self):
        cleaned = prepare_property_data({
            'id': 'offline_1',
            'user_id': 'someone',
            'owner_name': ' <i>Ana</i> ',
            'cpf': '529.982.247-25',
            'due_date': '',
            'farm_name': None,
        })

        assert cleaned == {
            'owner_name': 'iAna/i',
            'cpf': '52998224725',
            'due_date': None,
            'farm_name': '',
        }


@pytest.mark.django_db
class TestPropertyManagementService:

    def test_create_rejects_invalid_data(self, owner):
        with pytest.raises(InvalidPropertyDataError) as exc_info:
            create_property(user=owner, data={'owner_name': 'Ana', 'cpf': '11111111111'})

        assert 'cpf' in exc_info.value.errors

    def test_create_parses_string_values(self, owner):
        instance = create_property(user=owner, data={
            'owner_name': 'Ana Costa',
            'amount': '1234.50',
            'due_date': '2025-01-31',
        })

        instance.refresh_from_db()
        assert instance.amount == Decimal('1234.50')
        assert instance.due_date.isoformat() == '2025-01-31'

    def test_create_duplicate_raises(self, owner, property_pending):
        with pytest.raises(DuplicatePropertyError) as exc_info:
            create_property(
                user=owner,
                data={'owner_name': 'João da Silva', 'farm_name': 'Sítio Boa Vista'},
                check_duplicates=True,
            )

        assert exc_info.value.existing == property_pending

    def test_update_foreign_property_not_found(self, owner, foreign_property):
        with pytest.raises(PropertyNotFoundError):
            update_property(property_id=foreign_property.id, user=owner, data={'owner_name': 'X'})

    def test_update_with_garbage_id_not_found(self, owner):
        with pytest.raises(PropertyNotFoundError):
            update_property(property_id='not-a-number', user=owner, data={})

    def test_delete(self, owner, property_pending):
        delete_property(property_id=property_pending.id, user=owner)

        assert not RuralProperty.objects.filter(id=property_pending.id).exists()


# =============================================================================
# Duplicate Detection Tests
# =============================================================================

@pytest.mark.django_db
class TestDuplicateDetection:

    def test_cpf_takes_precedence(self, owner, property_pending, property_paid):
        match = find_duplicate(
            user=owner,
            cpf='52998224725',
            owner_name='Maria Oliveira',
            farm_name='Fazenda Santa Rita',
        )

        assert match == property_pending

    def test_unknown_cpf_does_not_fall_back_to_names(self, owner, property_pending):
        match = find_duplicate(user=owner, cpf='11144477735', owner_name='João da Silva', farm_name='Sítio Boa Vista')

        assert match is None

    def test_fuzzy_name_match(self, owner, property_pending):
        match = find_duplicate(user=owner, owner_name='Joao da Silva', farm_name='Sitio Boa Vista')

        assert match == property_pending

    def test_names_must_both_match(self, owner, property_pending):
        match = find_duplicate(user=owner, owner_name='João da Silva', farm_name='Fazenda Outra')

        assert match is None

    def test_needs_both_names(self, owner, property_pending):
        assert find_duplicate(user=owner, owner_name='João da Silva') is None

    def test_exclude_id(self, owner, property_pending):
        match = find_duplicate(user=owner, cpf='52998224725', exclude_id=property_pending.id)

        assert match is None


# =============================================================================
# Offline Sync Tests
# =============================================================================

@pytest.mark.django_db
class TestOfflineSync:

    def test_unresolved_offline_id_is_error(self, owner):
        summary = apply_sync_operations(user=owner, operations=[
            {'type': 'update', 'data': {'id': 'offline_123', 'owner_name': 'Ninguém'}},
        ])

        assert summary['synced'] == 0
        assert summary['failed'] == 1
        assert 'offline_123' in summary['results'][0]['error']

    def test_create_then_delete_in_same_batch(self, owner):
        summary = apply_sync_operations(user=owner, operations=[
            {'type': 'create', 'data': {'id': 'offline_9', 'owner_name': 'Temporário'}},
            {'type': 'delete', 'data': {'id': 'offline_9'}},
        ])

        assert summary['synced'] == 2
        assert summary['results'][0]['client_id'] == 'offline_9'
        assert not RuralProperty.objects.filter(owner_name='Temporário').exists()

    def test_failed_item_does_not_stop_batch(self, owner):
        summary = apply_sync_operations(user=owner, operations=[
            {'type': 'create', 'data': {'owner_name': 'X'}},
            {'type': 'create', 'data': {'owner_name': 'Válido'}},
        ])

        assert [r['status'] for r in summary['results']] == ['error', 'ok']
        assert RuralProperty.objects.filter(owner_name='Válido').exists()

    def test_missing_target_id(self, owner):
        summary = apply_sync_operations(user=owner, operations=[{'type': 'delete', 'data': {}}])

        assert summary['results'][0]['status'] == 'error'
        assert 'last_sync' in summary

    def test_delete_reports_integer_id(self, owner, property_pending):
        summary = apply_sync_operations(user=owner, operations=[
            {'type': 'delete', 'data': {'id': str(property_pending.id)}},
        ])

        assert summary['results'][0] == {
            'index': 0, 'type': 'delete', 'id': property_pending.id, 'status': 'ok',
        }

    def test_non_numeric_target_id(self, owner):
        summary = apply_sync_operations(user=owner, operations=[
            {'type': 'update', 'data': {'id': 'abc', 'owner_name': 'Ninguém'}},
        ])

        assert summary['failed'] == 1
        assert 'abc' in summary['results'][0]['error']

    def test_unknown_type_fails_only_that_item(self, owner):
        summary = apply_sync_operations(user=owner, operations=[
            {'type': 'merge', 'data': {'id': 1}},
            {'type': 'create', 'data': {'owner_name': 'Depois do Erro'}},
        ])

        assert [r['status'] for r in summary['results']] == ['error', 'ok']
        assert 'merge' in summary['results'][0]['error']
