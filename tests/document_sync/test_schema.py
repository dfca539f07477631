from datetime import date

import pytest

from vaultsync_core.document_sync.schema import VaultDocument, parse_data
from vaultsync_core.errors import EntryValidationError


def front_matter(**extra):
    return {'title': 'A note', 'permalink': '/vault/a', **extra}


class TestParseData:
    @pytest.mark.asyncio
    async def test_valid(self):
        data = await parse_data('a', front_matter(tags=['x']), 'vault/a.md')

        assert data['title'] == 'A note'
        assert data['tags'] == ['x']
        assert data['draft'] is False
        assert data['links'] == []

    @pytest.mark.asyncio
    async def test_extra_fields_kept(self):
        data = await parse_data('a', front_matter(rating=5), 'vault/a.md')
        assert data['rating'] == 5

    @pytest.mark.asyncio
    async def test_dates_become_utc_datetimes(self):
        data = await parse_data('a', front_matter(created=date(2024, 1, 2)), 'vault/a.md')
        assert data['created'].startswith('2024-01-02T00:00:00')

    @pytest.mark.asyncio
    async def test_numeric_title(self):
        data = await parse_data('a', front_matter(title=2024), 'vault/a.md')
        assert data['title'] == '2024'

    @pytest.mark.asyncio
    async def test_missing_title(self):
        with pytest.raises(EntryValidationError, match='title'):
            await parse_data('a', {'permalink': '/vault/a'}, 'vault/a.md')

    @pytest.mark.asyncio
    async def test_invalid_draft_names_entry(self):
        with pytest.raises(EntryValidationError) as exc_info:
            await parse_data('notes/a', front_matter(draft='maybe'), 'vault/notes/a.md')

        assert exc_info.value.entry_id == 'notes/a'
        assert 'draft' in exc_info.value.message
        assert 'vault/notes/a.md' in exc_info.value.message


def test_schema_allows_extra_fields():
    document = VaultDocument(title='t', permalink='/t', cssclass='wide')
    assert document.model_extra == {'cssclass': 'wide'}
