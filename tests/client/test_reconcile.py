"""
Tests for merging live pushes into the local list
"""
from client.reconcile import is_placeholder_id, matches_view, merge, normalize_record


def record(record_id, email='a@example.com', **extra):
    data = {'id': record_id, 'fullName': 'A', 'email': email, 'service': 'EduTech', 'course': 'Online Tutoring'}
    data.update(extra)
    return data


class TestMerge:
    """merge(local, incoming)"""

    def test_new_record_prepended(self):
        local = [record('1', 'one@example.com')]
        merged = merge(local, record('2', 'two@example.com'))

        assert [r['id'] for r in merged] == ['2', '1']
        assert len(local) == 1

    def test_same_id_replaced_in_place(self):
        local = [record('1', 'one@example.com'), record('2', 'two@example.com')]
        merged = merge(local, record('2', 'two@example.com', fullName='Updated'))

        assert [r['id'] for r in merged] == ['1', '2']
        assert merged[1]['fullName'] == 'Updated'

    def test_placeholder_matched_by_email(self):
        local = [record('local-abc', 'Asha@Example.com')]
        merged = merge(local, record('server-1', 'asha@example.com'))

        assert [r['id'] for r in merged] == ['server-1']

    def test_same_email_different_real_ids_kept_apart(self):
        local = [record('1', 'asha@example.com')]
        merged = merge(local, record('2', 'asha@example.com'))

        assert [r['id'] for r in merged] == ['2', '1']

    def test_empty_email_never_matches(self):
        local = [record('local-1', '')]
        merged = merge(local, record('2', ''))

        assert len(merged) == 2

    def test_record_without_id_ignored(self):
        local = [record('1')]
        assert merge(local, {'fullName': 'No id'}) == local


class TestHelpers:
    def test_placeholder_prefix(self):
        assert is_placeholder_id('local-123')
        assert not is_placeholder_id('123')
        assert not is_placeholder_id(None)

    def test_normalize_fills_defaults(self):
        normalized = normalize_record({'id': 7, 'email': ' X@Y.com '})

        assert normalized['id'] == '7'
        assert normalized['email'] == 'x@y.com'
        assert normalized['fullName'] == 'Unknown'
        assert normalized['service'] == 'General'

    def test_matches_view(self):
        r = record('1', 'asha@example.com', fullName='Asha Rao')

        assert matches_view(r)
        assert matches_view(r, search='RAO')
        assert matches_view(r, service='All')
        assert not matches_view(r, service='Data Science')
        assert not matches_view(r, search='ravi')
