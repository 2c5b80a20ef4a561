"""Tests for the plugin lifecycle controller."""

from netpluginspect.inspection.lifecycle import PluginLifecycle, PluginState
from netpluginspect.schemas.report import Severity

PLUGIN = "acme/netplug:1.0"


def _severities(report):
    return [f.severity for f in report.findings]


def test_clean_install_and_remove(runtime, fake_docker, report, ref):
    lifecycle = PluginLifecycle(runtime, report, ref)
    tested = []

    assert lifecycle.run([lambda plugin: tested.append(plugin) or True]) is True

    assert tested == [PLUGIN]
    assert lifecycle.state is PluginState.REMOVED
    assert fake_docker.plugins == set()
    assert _severities(report) == [Severity.SUCCESS, Severity.SUCCESS]
    assert report.warning_count == 0


def test_existing_plugin_is_removed_with_warning(runtime, fake_docker, report, ref):
    fake_docker.plugins.add(PLUGIN)
    lifecycle = PluginLifecycle(runtime, report, ref)

    lifecycle.ensure_clean()

    assert fake_docker.plugins == set()
    assert _severities(report) == [Severity.WARNING, Severity.SUCCESS]
    assert "already installed" in report.findings[0].text
    assert lifecycle.state is PluginState.NOT_INSTALLED


def test_ensure_clean_is_quiet_when_nothing_installed(runtime, fake_docker, report, ref):
    PluginLifecycle(runtime, report, ref).ensure_clean()
    assert report.findings == ()
    assert not fake_docker.ran("plugin remove")


def test_install_failure_skips_tests_and_removal(runtime, fake_docker, report, ref):
    fake_docker.fail("plugin install", "denied: requested access to the resource is denied")
    lifecycle = PluginLifecycle(runtime, report, ref)
    tested = []

    assert lifecycle.run([lambda plugin: tested.append(plugin) or True]) is False

    assert tested == []
    assert lifecycle.state is PluginState.INSTALL_FAILED
    assert not fake_docker.ran("plugin remove")
    assert _severities(report) == [Severity.ERROR]
    assert report.findings[0].text == (
        "Unable to install the Docker networking plugin!, "
        "denied: requested access to the resource is denied"
    )


def test_install_failure_without_output(runtime, fake_docker, report, ref):
    fake_docker.fail("plugin install")
    PluginLifecycle(runtime, report, ref).install()
    assert report.findings[0].text == "Unable to install the Docker networking plugin!"


def test_remove_after_failed_install_is_a_no_op(runtime, fake_docker, report, ref):
    fake_docker.fail("plugin install", "boom")
    lifecycle = PluginLifecycle(runtime, report, ref)
    lifecycle.install()

    assert lifecycle.remove() is False
    assert len(report.findings) == 1


def test_remove_failure_is_recorded_once(runtime, fake_docker, report, ref):
    fake_docker.fail("plugin remove", "plugin is in use")
    lifecycle = PluginLifecycle(runtime, report, ref)

    assert lifecycle.run([lambda plugin: True]) is False

    assert _severities(report) == [Severity.SUCCESS, Severity.ERROR]
    assert "plugin is in use" in report.findings[-1].text
    assert sum(1 for c in fake_docker.calls if "plugin remove" in c) == 1


def test_failed_test_still_removes_plugin(runtime, fake_docker, report, ref):
    lifecycle = PluginLifecycle(runtime, report, ref)
    assert lifecycle.run([lambda plugin: False]) is False
    assert fake_docker.plugins == set()
    assert lifecycle.state is PluginState.REMOVED


def test_steps_are_announced(runtime, report, ref):
    steps = []
    report.on_step = lambda number, title: steps.append(title)
    PluginLifecycle(runtime, report, ref).run([])
    assert steps[0].startswith("Installing the Docker networking plugin")
    assert steps[-1] == "Removing the Docker networking plugin"
