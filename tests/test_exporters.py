"""Tests for the four format strategies and the file sink."""

import re

import pytest
import yaml

from conftest import FakeRecordSource, checkbox_prop, make_block, make_database, make_record, select_prop, text_prop
from exporters import (
    EXPORTERS,
    DataviewExporter,
    FileSink,
    MarkdownTableExporter,
    ObsidianBaseExporter,
    SeparatePagesExporter,
    create_exporter
)
from exporters.dataview_exporter import dataview_column, render_dataview_table
from exporters.markdown_table_exporter import render_markdown_table, table_title
from exporters.obsidian_base_exporter import build_base_definition, render_base_file, used_properties
from models import BlockKind, ConversionFormat
from progress import ProgressReporter


@pytest.fixture
def records():
    return [
        make_record('r1', 'Alpha', Status=select_prop('Open'), Notes=text_prop('first')),
        make_record('r2', 'Beta', Status=select_prop('Done'), Done=checkbox_prop(True)),
        make_record('r3', 'Gamma'),
    ]


def reporter_for(registry, channel, conversion_id='job-1'):
    registry.register(conversion_id, channel)
    return ProgressReporter(registry, conversion_id)


class TestFileSink:
    """Test directory creation and file writing."""

    def test_creates_nested_directory(self, tmp_path):
        target = tmp_path / 'a' / 'b'
        FileSink().ensure_directory(target)
        assert target.is_dir()

    def test_write_overwrites(self, tmp_path):
        sink = FileSink()
        sink.write_text(tmp_path, 'x.md', 'one')
        sink.write_text(tmp_path, 'x.md', 'twö')
        assert (tmp_path / 'x.md').read_text(encoding='utf-8') == 'twö'

    def test_write_error_propagates(self, tmp_path):
        with pytest.raises(OSError):
            FileSink().write_text(tmp_path / 'missing', 'x.md', 'content')


class TestSeparatePagesExporter:
    """Test one note per record."""

    def test_writes_one_note_per_record(self, tmp_path, database, records):
        source = FakeRecordSource(database, blocks={'r1': [make_block(BlockKind.PARAGRAPH, 'Body')]})
        files = SeparatePagesExporter(source).export(records, database, str(tmp_path))

        assert files == ['Alpha.md', 'Beta.md', 'Gamma.md']
        assert (tmp_path / 'Alpha.md').read_text(encoding='utf-8').endswith('# Alpha\n\nBody\n\n')

    def test_failed_record_is_skipped(self, tmp_path, database, records):
        source = FakeRecordSource(database, failing_records=['r2'])
        exporter = SeparatePagesExporter(source)
        files = exporter.export(records, database, str(tmp_path))

        assert files == ['Alpha.md', 'Gamma.md']
        assert exporter.records_failed == 1
        assert not (tmp_path / 'Beta.md').exists()

    def test_duplicate_titles_get_suffix(self, tmp_path, database):
        duplicates = [make_record('r1', 'Same'), make_record('r2', 'same'), make_record('r3', 'Same')]
        files = SeparatePagesExporter(FakeRecordSource(database)).export(duplicates, database, str(tmp_path))

        assert files == ['Same.md', 'same_2.md', 'Same_3.md']
        assert 'notion_id: r2' in (tmp_path / 'same_2.md').read_text(encoding='utf-8')

    def test_progress_every_tenth_and_last(self, tmp_path, database, registry, channel):
        many = [make_record(f'r{i}', f'Note {i}') for i in range(25)]
        exporter = SeparatePagesExporter(FakeRecordSource(database), reporter=reporter_for(registry, channel))
        exporter.export(many, database, str(tmp_path))

        assert [u.current_record for u in channel.updates] == [1, 11, 21, 25]
        assert channel.progress_values == [52, 68, 84, 90]
        assert all(u.total_records == 25 for u in channel.updates)

    def test_write_error_propagates(self, tmp_path, database, records):
        exporter = SeparatePagesExporter(FakeRecordSource(database))
        with pytest.raises(OSError):
            exporter.export(records, database, str(tmp_path / 'missing'))


class TestDataviewExporter:
    """Test notes plus the Dataview query document."""

    def test_writes_notes_then_table(self, tmp_path, database, records):
        files = DataviewExporter(FakeRecordSource(database)).export(records, database, str(tmp_path))
        assert files == ['Alpha.md', 'Beta.md', 'Gamma.md', 'Tasks_Table.md']

    def test_table_document(self, database):
        content = render_dataview_table(database, 'Notion Imports/Tasks', 3)
        assert content.startswith('# Tasks - Table View\n\n')
        assert '```dataview\nTABLE Status, Notes, Done\nFROM "Notion Imports/Tasks"\n' in content
        assert 'WHERE notion_id\nSORT file.name ASC\n```\n\n## Instructions\n' in content
        assert content.endswith('**Total records:** 3\n')

    def test_no_properties_falls_back_to_dates(self):
        content = render_dataview_table(make_database('Empty'), 'Empty', 0)
        assert 'TABLE created, updated\n' in content

    def test_columns_with_spaces_are_quoted(self):
        database = make_database('Tasks', **{'Due Date': 'date', 'Status': 'select', 'A, B': 'rich_text'})
        content = render_dataview_table(database, 'Tasks', 0)
        assert 'TABLE row["Due Date"] AS "Due Date", Status, row["A, B"] AS "A, B"\n' in content

    def test_quotes_in_column_names_escaped(self):
        assert dataview_column('Say "hi"') == 'row["Say \\"hi\\""] AS "Say \\"hi\\""'
        assert dataview_column('due-date') == 'due-date'

    def test_query_folder_defaults_to_directory_name(self, tmp_path, database, records):
        output_dir = tmp_path / 'Tasks'
        output_dir.mkdir()
        DataviewExporter(FakeRecordSource(database)).export(records, database, str(output_dir))
        assert 'FROM "Tasks"' in (output_dir / 'Tasks_Table.md').read_text(encoding='utf-8')

    def test_progress_ranges(self, tmp_path, database, records, registry, channel):
        exporter = DataviewExporter(FakeRecordSource(database), reporter=reporter_for(registry, channel))
        exporter.export(records, database, str(tmp_path))

        assert channel.progress_values == [60, 80, 85]
        assert channel.updates[-1].message == 'Creating Dataview table...'


class TestMarkdownTableExporter:
    """Test the single table document."""

    def test_only_table_written(self, tmp_path, database, records):
        source = FakeRecordSource(database, failing_records=['r1', 'r2', 'r3'])
        files = MarkdownTableExporter(source).export(records, database, str(tmp_path))

        assert files == ['Tasks_Table.md']
        assert [p.name for p in tmp_path.iterdir()] == ['Tasks_Table.md']

    def test_table_shape(self, database, records):
        content = render_markdown_table(database, records, generated_on='2024-06-01')
        lines = content.split('\n')

        assert lines[0] == '# Tasks'
        assert lines[2] == '**Total records:** 3  '
        assert lines[3] == '**Last updated:** 2024-06-01'
        assert lines[5] == '| Name | Status | Notes | Done | Created | Updated |'
        assert lines[6] == '| --- | --- | --- | --- | --- | --- |'
        assert lines[7] == '| Alpha | Open | first | - | 2024-01-15 | 2024-02-01 |'
        assert lines[8] == '| Beta | Done | - | true | 2024-01-15 | 2024-02-01 |'
        assert lines[9] == '| Gamma | - | - | - | 2024-01-15 | 2024-02-01 |'
        assert '## Notes' in content

    def test_rows_have_header_width(self, database, records):
        content = render_markdown_table(database, records, generated_on='2024-06-01')
        rows = [line for line in content.split('\n') if line.startswith('| ')]
        assert len(rows) == len(records) + 2
        assert {row.count(' | ') for row in rows} == {5}

    def test_cells_escaped_and_truncated(self, database):
        record = make_record('r1', 'A|B', Notes=text_prop('x' * 150 + '|'))
        content = render_markdown_table(database, [record], generated_on='2024-06-01')
        assert '| A\\|B | - | ' + 'x' * 100 + ' | ' in content

    def test_header_names_escaped(self):
        database = make_database('Tasks', **{'In|Out': 'rich_text'})
        record = make_record('r1', 'A', **{'In|Out': text_prop('x')})
        content = render_markdown_table(database, [record], generated_on='2024-06-01')
        rows = [line for line in content.split('\n') if line.startswith('| ')]

        assert rows[0] == '| Name | In\\|Out | Created | Updated |'
        assert rows[2] == '| A | x | 2024-01-15 | 2024-02-01 |'
        assert {len(re.findall(r'(?<!\\)\|', row)) for row in rows} == {5}

    def test_untitled_row_uses_id_tail(self):
        record = make_record('0123456789abcdef')
        assert table_title(record) == 'Page 89abcdef'

    def test_progress_every_fiftieth_and_last(self, tmp_path, database, registry, channel):
        rows = [make_record(f'r{i}', f'Row {i}') for i in range(120)]
        exporter = MarkdownTableExporter(FakeRecordSource(database), reporter=reporter_for(registry, channel))
        exporter.export(rows, database, str(tmp_path))

        assert [u.message for u in channel.updates] == [
            'Creating markdown table...',
            'Added row 1/120 to table...',
            'Added row 51/120 to table...',
            'Added row 101/120 to table...',
            'Added row 120/120 to table...',
        ]
        assert channel.progress_values[0] == 60
        assert channel.progress_values[-1] == 90


class TestObsidianBaseExporter:
    """Test notes plus the ``.base`` view definition."""

    def test_writes_notes_then_base(self, tmp_path, database, records):
        files = ObsidianBaseExporter(FakeRecordSource(database)).export(records, database, str(tmp_path))
        assert files == ['Alpha.md', 'Beta.md', 'Gamma.md', 'Tasks.base']

    def test_used_properties_in_first_seen_order(self, records):
        records.append(make_record('r4', 'Delta', Notes=text_prop('   '), Extra=select_prop('x')))
        assert used_properties(records) == ['Status', 'Notes', 'Done', 'Extra']

    def test_unused_property_left_out(self, database):
        records = [make_record('r1', 'A', Status=select_prop('Open'), Notes=text_prop(' '))]
        definition = build_base_definition(database, used_properties(records))
        assert list(definition['properties']) == ['Status', 'file.ctime', 'file.mtime']

    def test_definition(self, database):
        definition = build_base_definition(database, ['Status', 'Done'])

        assert definition['properties']['Status'] == {'displayName': 'Status'}
        assert definition['properties']['file.mtime'] == {'displayName': 'Modified'}

        table, cards = definition['views']
        assert table['type'] == 'table'
        assert table['name'] == 'Tasks Table'
        assert table['limit'] == 100
        assert table['filters'] == 'file.ext == "md"'
        assert table['order'] == ['file.name', 'Status', 'Done', 'file.ctime', 'file.mtime']
        assert cards == {'type': 'card', 'name': 'Tasks Cards', 'limit': 50}

    def test_order_limited_to_eight_properties(self, database):
        names = [f'P{i}' for i in range(12)]
        order = build_base_definition(database, names)['views'][0]['order']
        assert order == ['file.name', *names[:8], 'file.ctime', 'file.mtime']

    def test_file_is_valid_yaml_with_comments(self, database):
        content = render_base_file(database, ['Status: phase', 'Done'])

        assert content.startswith('# Obsidian Base file for Tasks\n# Generated from Notion database\n\n')
        assert '# 2. Requires Obsidian 1.7+ with Bases feature enabled\n' in content
        parsed = yaml.safe_load(content)
        assert list(parsed['properties'])[0] == 'Status: phase'
        assert parsed['views'][1]['name'] == 'Tasks Cards'


class TestCreateExporter:
    """Test strategy selection."""

    def test_every_format_has_a_strategy(self):
        assert set(EXPORTERS) == set(ConversionFormat)

    @pytest.mark.parametrize('conversion_format,expected', [
        (ConversionFormat.SEPARATE_PAGES, SeparatePagesExporter),
        ('dataview-table', DataviewExporter),
        ('markdown-table', MarkdownTableExporter),
        (ConversionFormat.OBSIDIAN_BASE, ObsidianBaseExporter),
    ])
    def test_selects_strategy(self, database, conversion_format, expected):
        exporter = create_exporter(conversion_format, FakeRecordSource(database))
        assert isinstance(exporter, expected)

    def test_unknown_format(self, database):
        with pytest.raises(ValueError):
            create_exporter('pdf', FakeRecordSource(database))
