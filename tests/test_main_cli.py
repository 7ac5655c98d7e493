"""
Tests for the command-line entry point.
"""
import pytest

import railsi18n.main as cli


@pytest.fixture
def rails_app(tmp_path):
    root = tmp_path / "shop"
    locales = root / "config" / "locales"
    locales.mkdir(parents=True)
    (locales / "en.yml").write_text(
        "en:\n"
        "  hello:\n"
        "    world: Hello world\n"
        "  date:\n"
        "    formats:\n"
        "      short: '%b %d'\n"
        "      long: '%B %d, %Y'\n",
        encoding="utf-8",
    )
    (locales / "de.yml").write_text("de:\n  hello:\n    world: Hallo Welt\n", encoding="utf-8")
    (root / "config" / "application.rb").write_text(
        "module Shop\n"
        "  class Application < Rails::Application\n"
        "    config.i18n.default_locale = :de\n"
        "  end\n"
        "end\n",
        encoding="utf-8",
    )
    return root


def run_cli(rails_app, tmp_path, *args):
    return cli.main(["--workspace", str(rails_app), "--config", str(tmp_path / "missing.ini"), *args])


def test_key_is_required():
    with pytest.raises(SystemExit):
        cli.main([])


def test_watch_requires_key():
    with pytest.raises(SystemExit):
        cli.main(["--list-locales", "--watch", "1"])


def test_watch_rejects_negative_duration():
    with pytest.raises(SystemExit):
        cli.main(["--watch", "-1", "hello.world"])


def test_resolves_in_detected_default_locale(rails_app, tmp_path, capsys):
    assert run_cli(rails_app, tmp_path, "hello.world") == 0
    assert capsys.readouterr().out.strip() == "Hallo Welt"


def test_explicit_locale(rails_app, tmp_path, capsys):
    assert run_cli(rails_app, tmp_path, "--locale", "en", "hello.world") == 0
    assert capsys.readouterr().out.strip() == "Hello world"


def test_regional_locale_falls_back_to_base(rails_app, tmp_path, capsys):
    assert run_cli(rails_app, tmp_path, "--locale", "de-AT", "hello.world") == 0
    assert capsys.readouterr().out.strip() == "Hallo Welt"


def test_missing_key(rails_app, tmp_path, capsys):
    assert run_cli(rails_app, tmp_path, "hello.nobody") == 1
    assert "translation missing: hello.nobody (de)" in capsys.readouterr().err


def test_list_locales(rails_app, tmp_path, capsys):
    assert run_cli(rails_app, tmp_path, "--list-locales") == 0
    assert capsys.readouterr().out.strip() == "shop: de, en (default: de)"


def test_list_keys(rails_app, tmp_path, capsys):
    assert run_cli(rails_app, tmp_path, "--locale", "en", "--list-keys", "date") == 0
    assert capsys.readouterr().out.split() == ["date.formats.long", "date.formats.short"]


def test_source_outside_every_workspace(rails_app, tmp_path, capsys):
    outside = tmp_path / "elsewhere" / "view.erb"

    assert run_cli(rails_app, tmp_path, "--source", str(outside), "hello.world") == 2
    assert "no translation source found" in capsys.readouterr().err
