from datetime import timedelta

import pytest
from click.testing import CliRunner

from securedelete.cli.commands import cli
from securedelete.config import (
    _config_file_path,
    get_effective_value,
    load_config,
    load_policy,
    set_config_value,
    validate_config_value,
)
from securedelete.managers.policy import DeletePolicy


@pytest.fixture(autouse=True)
def xdg(tmp_path, monkeypatch):
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path))
    for key in ('REQUIRED_CODE', 'HIGH_RISK_CATEGORIES', 'THRESHOLD_COUNT', 'GRACE_MINUTES', 'NOTIFY_DROPPED'):
        monkeypatch.delenv(f'SECUREDELETE_{key}', raising=False)
    return tmp_path


def _write_config(xdg, text):
    cfg_dir = xdg / 'securedelete'
    cfg_dir.mkdir(exist_ok=True)
    (cfg_dir / 'config.toml').write_text(text)


def test_defaults_without_config():
    policy = load_policy()
    assert policy == DeletePolicy()
    assert policy.required_code == '3001'
    assert policy.threshold_count == 10
    assert policy.grace_duration == timedelta(minutes=15)
    assert 'Scope Boxes' in policy.high_risk_categories


def test_policy_from_xdg_config(xdg):
    _write_config(xdg, 'threshold_count = 4\ngrace_minutes = 2.5\nhigh_risk_categories = ["Levels", "Sheets"]\n')
    policy = load_policy()
    assert policy.threshold_count == 4
    assert policy.grace_duration == timedelta(minutes=2.5)
    assert policy.high_risk_categories == frozenset({'Levels', 'Sheets'})


def test_env_overrides_config(xdg, monkeypatch):
    _write_config(xdg, 'threshold_count = 2\n')
    monkeypatch.setenv('SECUREDELETE_THRESHOLD_COUNT', '7')
    monkeypatch.setenv('SECUREDELETE_HIGH_RISK_CATEGORIES', 'Grids, Levels')
    policy = load_policy()
    assert policy.threshold_count == 7
    assert policy.high_risk_categories == frozenset({'Grids', 'Levels'})


def test_invalid_values_fall_back(xdg, monkeypatch):
    _write_config(xdg, 'threshold_count = 0\n')
    monkeypatch.setenv('SECUREDELETE_GRACE_MINUTES', 'soon')
    eff = get_effective_value('threshold_count')
    assert eff['config'] == 0
    assert eff['effective'] == 10
    assert load_policy().grace_duration == timedelta(minutes=15)


def test_unreadable_config_is_ignored(xdg):
    _write_config(xdg, 'this is = = not toml')
    assert load_config() == {}


@pytest.mark.parametrize('key,raw,expected', [
    ('threshold_count', '3', 3),
    ('threshold_count', 3.0, 3),
    ('grace_minutes', '10080', 10080.0),
    ('grace_minutes', '0', 0.0),
    ('notify_dropped', 'yes', True),
    ('high_risk_categories', 'Levels,, Grids ', ['Levels', 'Grids']),
    ('required_code', 'abc', 'abc'),
])
def test_validate_config_value(key, raw, expected):
    assert validate_config_value(key, raw) == expected


@pytest.mark.parametrize('key,raw', [
    ('threshold_count', '0'),
    ('threshold_count', 'ten'),
    ('grace_minutes', '-1'),
    ('grace_minutes', 'nan'),
    ('grace_minutes', 'inf'),
    ('grace_minutes', '-inf'),
    ('grace_minutes', '10081'),
    ('grace_minutes', '5000000000'),
    ('threshold_count', 2.7),
    ('threshold_count', True),
    ('notify_dropped', 'maybe'),
    ('required_code', '  '),
    ('db_path', '/tmp'),
])
def test_validate_config_value_rejects(key, raw):
    with pytest.raises(ValueError):
        validate_config_value(key, raw)


def test_set_config_value_preserves_comments(xdg):
    _write_config(xdg, '# site policy\nthreshold_count = 5\n')
    assert set_config_value('grace_minutes', '30')
    text = _config_file_path().read_text()
    assert '# site policy' in text
    assert load_config() == {'threshold_count': 5, 'grace_minutes': 30.0}


def test_set_config_value_rejects_invalid():
    assert set_config_value('threshold_count', '-3') is False
    assert not _config_file_path().exists()


def test_policy_rejects_invalid_constants():
    with pytest.raises(ValueError):
        DeletePolicy(required_code='')
    with pytest.raises(ValueError):
        DeletePolicy(threshold_count=0)
    with pytest.raises(ValueError):
        DeletePolicy(grace_duration=timedelta(minutes=-1))
    with pytest.raises(ValueError):
        DeletePolicy(grace_duration=timedelta(days=30))


def test_cli_config_set_writes_file():
    runner = CliRunner()
    result = runner.invoke(cli, ['config', 'set', 'threshold_count', '9', '--yes'])
    assert result.exit_code == 0
    assert load_config().get('threshold_count') == 9


def test_cli_config_set_masks_code_and_validates():
    runner = CliRunner()
    result = runner.invoke(cli, ['config', 'set', 'required_code', 'hunter2', '--yes'])
    assert 'hunter2' not in result.output
    assert load_config().get('required_code') == 'hunter2'

    result = runner.invoke(cli, ['config', 'set', 'threshold_count', 'lots', '--yes'])
    assert 'Validation error' in result.output


def test_cli_config_get_defaults(monkeypatch):
    monkeypatch.setenv('SECUREDELETE_GRACE_MINUTES', '5')
    runner = CliRunner()
    result = runner.invoke(cli, ['config', 'get', 'grace_minutes', '--defaults'])
    assert 'env: 5' in result.output
    assert 'code_default: 15.0' in result.output
    assert 'effective: 5.0' in result.output


def test_cli_config_show_hides_code(monkeypatch):
    monkeypatch.setenv('SECUREDELETE_REQUIRED_CODE', 'topsecret')
    runner = CliRunner()
    result = runner.invoke(cli, ['config', 'show'])
    assert result.exit_code == 0
    assert 'topsecret' not in result.output
    assert 'threshold_count: 10' in result.output
    assert 'Levels' in result.output


@pytest.mark.parametrize('raw', ['nan', 'inf', '5000000000'])
def test_unusable_grace_minutes_from_env_fall_back(raw, monkeypatch):
    monkeypatch.setenv('SECUREDELETE_GRACE_MINUTES', raw)
    policy = load_policy()
    assert policy.grace_duration == timedelta(minutes=15)


def test_fractional_threshold_in_config_falls_back(xdg):
    _write_config(xdg, 'threshold_count = 2.7\ngrace_minutes = inf\n')
    assert get_effective_value('threshold_count')['effective'] == 10
    policy = load_policy()
    assert policy.threshold_count == 10
    assert policy.grace_duration == timedelta(minutes=15)


def test_whole_float_threshold_in_config_is_accepted(xdg):
    _write_config(xdg, 'threshold_count = 4.0\n')
    assert load_policy().threshold_count == 4


def test_cli_config_set_rejects_unbounded_grace():
    runner = CliRunner()
    result = runner.invoke(cli, ['config', 'set', 'grace_minutes', 'nan', '--yes'])
    assert 'Validation error' in result.output
    result = runner.invoke(cli, ['config', 'set', 'grace_minutes', '5000000000', '--yes'])
    assert 'Validation error' in result.output
    assert not _config_file_path().exists()


def test_cli_config_get_hides_code(xdg, monkeypatch):
    _write_config(xdg, 'required_code = "filesecret"\n')
    monkeypatch.setenv('SECUREDELETE_REQUIRED_CODE', 'envsecret')
    runner = CliRunner()

    result = runner.invoke(cli, ['config', 'get', 'required_code'])
    assert result.exit_code == 0
    assert 'filesecret' not in result.output
    assert '(set)' in result.output

    result = runner.invoke(cli, ['config', 'get', 'required_code', '--defaults'])
    assert result.exit_code == 0
    for secret in ('filesecret', 'envsecret', '3001'):
        assert secret not in result.output
    assert 'env: (set)' in result.output
    assert 'effective: (set)' in result.output


def test_cli_config_get_code_unset_in_file(monkeypatch):
    runner = CliRunner()
    result = runner.invoke(cli, ['config', 'get', 'required_code', '--defaults'])
    assert 'env: None' in result.output
    assert 'config: None' in result.output
