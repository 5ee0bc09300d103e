import pytest

from adapters.engines import ENGINE_INSTALLERS, FabricInstaller, ForgeInstaller, PaperInstaller, discover_forge_jar
from core.domain.errors import EngineInstallError, ExternalCommandError, InstalledArtifactNotFound
from core.domain.models import EngineVariant


def _build(cls, settings, renderer, ops, reporter):
    return cls(settings=settings, renderer=renderer, system_ops=ops, reporter=reporter)


def _fake_forge_installer(produced=("forge-1.20.1.jar",), seen=None):
    def _run(script, cwd):
        if seen is not None:
            seen.append(script.read_text(encoding="utf-8"))
        for name in produced:
            (cwd / name).write_bytes(b"server")
        (cwd / "installer.jar.log").write_text("done", encoding="utf-8")
        (cwd / "run.sh").write_text("#!/bin/sh\n", encoding="utf-8")
        (cwd / "run.bat").write_text("@echo off\n", encoding="utf-8")

    return _run


def test_registry_covers_every_variant():
    assert ENGINE_INSTALLERS[EngineVariant.PAPER] is PaperInstaller
    assert ENGINE_INSTALLERS[EngineVariant.FORGE] is ForgeInstaller
    assert ENGINE_INSTALLERS[EngineVariant.FABRIC] is FabricInstaller


def test_discovery_skips_the_installer_jar(tmp_path):
    (tmp_path / "forge-1.20.1-installer.jar").write_bytes(b"")
    (tmp_path / "forge-1.20.1.jar").write_bytes(b"")
    assert discover_forge_jar(tmp_path) == ["forge-1.20.1.jar"]


def test_discovery_orders_candidates_lexicographically(tmp_path):
    for name in ("forge-1.20.1.jar", "forge-1.19.jar", "paper.jar", "forge-notes.txt"):
        (tmp_path / name).write_bytes(b"")
    assert discover_forge_jar(tmp_path) == ["forge-1.19.jar", "forge-1.20.1.jar"]


def test_discovery_with_no_match(tmp_path):
    (tmp_path / "installer.jar").write_bytes(b"")
    assert discover_forge_jar(tmp_path) == []


def test_paper_copies_jar_and_writes_start_script(settings, renderer, ops, reporter, installation_factory):
    installation = installation_factory()
    jar = _build(PaperInstaller, settings, renderer, ops, reporter).install(installation)

    assert jar == "paper.jar"
    assert (installation.root / "paper.jar").read_bytes() == b"paper-jar-bytes"
    script = (installation.root / "start.sh").read_text(encoding="utf-8")
    assert "-Xms1G -Xmx2G" in script
    assert "-jar paper.jar" in script
    assert ops.calls == []


def test_forge_runs_both_phases(settings, renderer, reporter, installation_factory, make_ops):
    seen: list[str] = []
    ops = make_ops(on_run_script=_fake_forge_installer(seen=seen))
    installation = installation_factory(engine=EngineVariant.FORGE)

    jar = _build(ForgeInstaller, settings, renderer, ops, reporter).install(installation)

    assert jar == "forge-1.20.1.jar"
    assert ops.names() == ["run_script"]
    _, script, cwd = ops.calls[0]
    assert cwd == installation.root
    assert script == installation.root / "start.sh"
    assert "-jar installer.jar --installServer" in seen[0]

    remaining = sorted(p.name for p in installation.root.iterdir())
    assert remaining == ["forge-1.20.1.jar", "start.sh"]
    final = (installation.root / "start.sh").read_text(encoding="utf-8")
    assert "-jar forge-1.20.1.jar" in final
    assert "--installServer" not in final
    phases = [fields["phase"] for fields in reporter.find("forge.phase_completed")]
    assert phases == ["installer", "finalize"]


def test_forge_installer_failure_stops_before_phase_two(settings, renderer, reporter, installation_factory, make_ops):
    ops = make_ops(
        failures={"run_script": ExternalCommandError(["sh", "start.sh"], 1, stderr="java not found")}
    )
    installation = installation_factory(engine=EngineVariant.FORGE)

    with pytest.raises(EngineInstallError) as excinfo:
        _build(ForgeInstaller, settings, renderer, ops, reporter).install(installation)

    assert excinfo.value.variant == "forge"
    assert isinstance(excinfo.value.cause, ExternalCommandError)
    assert (installation.root / "installer.jar").exists()
    assert "--installServer" in (installation.root / "start.sh").read_text(encoding="utf-8")
    assert reporter.find("forge.phase_completed") == []


def test_forge_without_produced_jar(settings, renderer, reporter, installation_factory, make_ops):
    ops = make_ops(on_run_script=_fake_forge_installer(produced=()))
    installation = installation_factory(engine=EngineVariant.FORGE)

    with pytest.raises(InstalledArtifactNotFound):
        _build(ForgeInstaller, settings, renderer, ops, reporter).install(installation)


def test_forge_picks_first_of_several_jars(settings, renderer, reporter, installation_factory, make_ops):
    ops = make_ops(on_run_script=_fake_forge_installer(produced=("forge-1.20.1.jar", "forge-1.19.jar")))
    installation = installation_factory(engine=EngineVariant.FORGE)

    jar = _build(ForgeInstaller, settings, renderer, ops, reporter).install(installation)

    assert jar == "forge-1.19.jar"
    assert reporter.find("forge.multiple_jars")[0]["selected"] == "forge-1.19.jar"


def test_forge_cleanup_is_best_effort(settings, renderer, reporter, installation_factory, make_ops):
    def _run(script, cwd):
        (cwd / "forge-1.20.1.jar").write_bytes(b"server")
        # A directory cannot be unlinked; cleanup must log and continue.
        (cwd / "run.bat").mkdir()

    ops = make_ops(on_run_script=_run)
    installation = installation_factory(engine=EngineVariant.FORGE)

    jar = _build(ForgeInstaller, settings, renderer, ops, reporter).install(installation)

    assert jar == "forge-1.20.1.jar"
    skipped = reporter.find("step.skipped")
    assert [fields["step"] for fields in skipped] == ["cleanup:run.bat"]
    assert "-jar forge-1.20.1.jar" in (installation.root / "start.sh").read_text(encoding="utf-8")


def test_fabric_runs_headless(settings, renderer, ops, reporter, installation_factory):
    installation = installation_factory(engine=EngineVariant.FABRIC)
    jar = _build(FabricInstaller, settings, renderer, ops, reporter).install(installation)

    assert jar == "fabric-server-launch.jar"
    script = (installation.root / "start.sh").read_text(encoding="utf-8")
    assert "-jar fabric-server-launch.jar nogui" in script


def test_missing_artifact_is_an_engine_error(settings, renderer, ops, reporter, installation_factory):
    (settings.resources_dir / "paper.jar").unlink()
    installation = installation_factory()

    with pytest.raises(EngineInstallError) as excinfo:
        _build(PaperInstaller, settings, renderer, ops, reporter).install(installation)
    assert isinstance(excinfo.value.cause, FileNotFoundError)
