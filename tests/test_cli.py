import json

import pytest
from click.testing import CliRunner

from securedelete.cli.commands import cli


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'xdg'))
    for key in ('REQUIRED_CODE', 'HIGH_RISK_CATEGORIES', 'THRESHOLD_COUNT', 'GRACE_MINUTES', 'NOTIFY_DROPPED'):
        monkeypatch.delenv(f'SECUREDELETE_{key}', raising=False)


def _write(tmp_path, name, records):
    p = tmp_path / name
    p.write_text(json.dumps(records))
    return str(p)


@pytest.fixture
def low_risk(tmp_path):
    return _write(tmp_path, 'walls.json', [
        {'id': 1, 'category': 'Walls', 'name': 'W1'},
        {'id': 2, 'category': 'Walls', 'name': 'W2'},
        {'id': 3, 'category': 'Doors', 'name': 'D1'},
    ])


@pytest.fixture
def high_risk(tmp_path):
    return _write(tmp_path, 'levels.json', [
        {'id': 10, 'category': 'Levels', 'name': 'Level 1'},
        {'id': 11, 'category': 'Walls', 'name': 'W11'},
    ])


def test_delete_low_risk_with_unchecked_row(low_risk):
    runner = CliRunner()
    result = runner.invoke(cli, ['delete', low_risk], input='2\ny\n')
    assert result.exit_code == 0
    assert 'Walls - W2' in result.output
    assert 'Code' not in result.output
    assert 'Outcome: APPROVED' in result.output
    assert 'Deleting 2 element(s):' in result.output
    assert '  - 1' in result.output and '  - 3' in result.output


def test_delete_high_risk_wrong_code(high_risk):
    runner = CliRunner()
    result = runner.invoke(cli, ['delete', high_risk], input='\nwrong\ny\n')
    assert result.exit_code == 0
    assert '[HIGH RISK]' in result.output
    assert 'Incorrect code. Deletion blocked.' in result.output
    assert 'Outcome: BLOCKED' in result.output
    assert 'Grace window' not in result.output


def test_grace_window_carries_over_between_files(high_risk, tmp_path):
    second = _write(tmp_path, 'grids.json', [{'id': 20, 'category': 'Grids', 'name': 'A'}])
    runner = CliRunner()
    # second attempt gets no code prompt: uncheck nothing, confirm
    result = runner.invoke(cli, ['delete', high_risk, second], input='\n3001\ny\n\ny\n')
    assert result.exit_code == 0
    assert result.output.count('Outcome: APPROVED') == 2
    assert result.output.count('Code:') == 1
    assert 'Grace window open for' in result.output


def test_delete_declined_is_cancelled(low_risk):
    runner = CliRunner()
    result = runner.invoke(cli, ['delete', low_risk], input='\nn\n')
    assert result.exit_code == 0
    assert 'Outcome: CANCELLED' in result.output


def test_delete_reprompts_on_bad_row_numbers(low_risk):
    runner = CliRunner()
    result = runner.invoke(cli, ['delete', low_risk], input='7\n1,2,3\ny\n')
    assert result.exit_code == 0
    assert 'out of range' in result.output
    assert 'No elements selected for deletion.' in result.output
    assert 'Outcome: BLOCKED' in result.output


def test_delete_empty_selection(tmp_path):
    empty = _write(tmp_path, 'empty.json', [])
    runner = CliRunner()
    result = runner.invoke(cli, ['delete', empty])
    assert result.exit_code == 0
    assert 'Nothing selected.' in result.output
    assert 'Outcome: BLOCKED' in result.output


def test_delete_uses_configured_code(high_risk, monkeypatch):
    monkeypatch.setenv('SECUREDELETE_REQUIRED_CODE', 'alpha')
    runner = CliRunner()
    result = runner.invoke(cli, ['delete', high_risk], input='\nalpha\ny\n')
    assert 'Outcome: APPROVED' in result.output


def test_delete_missing_file_errors(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ['delete', str(tmp_path / 'nope.json')])
    assert result.exit_code == 1
    assert 'Error:' in result.output


def test_classify_reports_high_risk(high_risk):
    runner = CliRunner()
    result = runner.invoke(cli, ['classify', high_risk])
    assert result.exit_code == 0
    assert 'Resolved 2 element(s) (0 could not be found)' in result.output
    assert 'Levels - Level 1' in result.output
    assert 'Code required: yes' in result.output


def test_classify_low_risk(low_risk):
    runner = CliRunner()
    result = runner.invoke(cli, ['classify', low_risk])
    assert 'High-risk elements' not in result.output
    assert 'Code required: no' in result.output


def test_delete_reports_missing_elements_before_review(tmp_path, monkeypatch):
    path = _write(tmp_path, 'stale.json', [
        {'id': 1, 'category': 'Walls', 'name': 'W1'},
        {'id': 2, 'missing': True},
    ])
    monkeypatch.setenv('SECUREDELETE_NOTIFY_DROPPED', '1')
    runner = CliRunner()
    result = runner.invoke(cli, ['delete', path], input='\ny\n')
    assert result.exit_code == 0
    assert 'Outcome: APPROVED' in result.output
    notice = result.output.index('1 element(s) could no longer be found and were skipped.')
    assert notice < result.output.index('Review elements')
    assert result.output.count('could no longer be found') == 1
