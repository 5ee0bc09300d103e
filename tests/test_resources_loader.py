import httpx
import pytest

from adapters.engines import PaperInstaller
from core.domain.errors import EngineInstallError
from core.domain.models import EngineVariant
from core.resources_loader import resolve_engine_artifact

PAPER_URL = "https://downloads.example.test/paper.jar"


@pytest.fixture
def remote_paper(settings, monkeypatch):
    """Settings sin `paper.jar` local y con URL de descarga; las peticiones van a `handler`."""

    (settings.resources_dir / "paper.jar").unlink()
    settings = settings.model_copy(update={"paper_download_url": PAPER_URL})
    requests: list[httpx.Request] = []

    def _install(handler):
        def _recording(request):
            requests.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(_recording))
        monkeypatch.setattr(httpx, "stream", client.stream)
        return requests

    return settings, _install


def _interrupted_body():
    yield b"partial-"
    raise httpx.ReadError("connection reset")


def test_local_artifact_skips_the_network(settings, monkeypatch):
    monkeypatch.setattr(httpx, "stream", lambda *a, **k: pytest.fail("must not download"))
    path = resolve_engine_artifact(EngineVariant.PAPER, settings)
    assert path == settings.resources_dir / "paper.jar"


def test_download_is_cached_in_resources(remote_paper):
    settings, install = remote_paper
    requests = install(lambda request: httpx.Response(200, content=b"downloaded-paper"))

    first = resolve_engine_artifact(EngineVariant.PAPER, settings)
    second = resolve_engine_artifact(EngineVariant.PAPER, settings)

    assert first == second == settings.resources_dir / "paper.jar"
    assert first.read_bytes() == b"downloaded-paper"
    assert len(requests) == 1
    assert requests[0].headers["User-Agent"] == settings.user_agent
    assert not (settings.resources_dir / "paper.jar.part").exists()


def test_http_error_leaves_no_partial_file(remote_paper):
    settings, install = remote_paper
    install(lambda request: httpx.Response(404))

    with pytest.raises(httpx.HTTPStatusError):
        resolve_engine_artifact(EngineVariant.PAPER, settings)

    assert sorted(p.name for p in settings.resources_dir.iterdir()) == [
        "fabric-server-launch.jar",
        "forge-installer.jar",
    ]


def test_interrupted_download_removes_partial_file(remote_paper):
    settings, install = remote_paper
    install(lambda request: httpx.Response(200, content=_interrupted_body()))

    with pytest.raises(httpx.ReadError):
        resolve_engine_artifact(EngineVariant.PAPER, settings)

    assert not (settings.resources_dir / "paper.jar.part").exists()
    assert not (settings.resources_dir / "paper.jar").exists()


def test_not_found_download_is_an_engine_error(remote_paper, renderer, ops, reporter, installation_factory):
    settings, install = remote_paper
    install(lambda request: httpx.Response(404))
    installer = PaperInstaller(settings=settings, renderer=renderer, system_ops=ops, reporter=reporter)

    with pytest.raises(EngineInstallError) as excinfo:
        installer.install(installation_factory())

    assert excinfo.value.exit_code == 6
    assert "artifact download failed" in str(excinfo.value)
