"""Run a local tika-server jar and fetch release jars.

``Server`` owns one ``java -jar`` child process and considers it ready once
``GET /version`` answers. ``download_server`` fetches a release jar from the
Apache archive and checks it against the published SHA-512 sidecar.
"""

from __future__ import annotations

import hashlib
import logging
import re
import subprocess
import time
from pathlib import Path
from typing import Sequence

import requests
from requests import exceptions as req_exc
from tqdm import tqdm

from .client import Client
from .config import DEFAULT_URL
from .errors import ServerError, TikaError
from .http_client import RequestsTransport, Transport
from .urls import port_of

logger = logging.getLogger(__name__)

ARCHIVE_BASE_URL = "https://archive.apache.org/dist/tika"

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?$")
_CHUNK_SIZE = 1 << 16


def server_jar_url(version: str) -> str:
    m = _VERSION_RE.match(version.strip())
    if not m:
        raise ValueError(f"not a Tika release version: {version!r}")
    v = version.strip()
    if int(m.group(1)) < 2:
        return f"{ARCHIVE_BASE_URL}/tika-server-{v}.jar"
    return f"{ARCHIVE_BASE_URL}/{v}/tika-server-standard-{v}.jar"


def sha512_of(path: Path) -> str:
    h = hashlib.sha512()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def _expected_sha512(session: requests.Session, jar_url: str, timeout_s: float) -> str:
    url = jar_url + ".sha512"
    try:
        resp = session.get(url, timeout=timeout_s)
    except req_exc.RequestException as e:
        raise ServerError(f"Failed to fetch {url}: {e}") from e
    if not 200 <= resp.status_code <= 299:
        raise ServerError(f"{url} returned HTTP {resp.status_code}")
    # Sidecar is either "<hash>" or "<hash>  <filename>".
    parts = resp.text.split()
    if not parts:
        raise ServerError(f"{url} is empty")
    return parts[0].lower()


def download_server(
    version: str,
    path: Path,
    *,
    session: requests.Session | None = None,
    verify: bool = True,
    progress: bool = True,
    timeout_s: float = 300,
) -> Path:
    """Download tika-server ``version`` to ``path`` and return the path.

    With ``verify`` an existing file whose SHA-512 already matches is kept
    as is; without it an existing file is trusted.
    """

    jar_url = server_jar_url(version)
    session = session or requests.Session()
    path = Path(path)

    expected = _expected_sha512(session, jar_url, timeout_s) if verify else None
    if path.exists():
        if expected is None or sha512_of(path) == expected:
            logger.info("Using existing %s", path)
            return path
        logger.info("Checksum mismatch for existing %s, downloading again", path)

    path.parent.mkdir(parents=True, exist_ok=True)
    part_path = path.with_name(path.name + ".part")
    h = hashlib.sha512()
    try:
        with session.get(jar_url, stream=True, timeout=timeout_s) as resp:
            if not 200 <= resp.status_code <= 299:
                raise ServerError(f"{jar_url} returned HTTP {resp.status_code}")
            total = int(resp.headers.get("Content-Length") or 0) or None
            with part_path.open("wb") as f, tqdm(
                total=total,
                unit="B",
                unit_scale=True,
                desc=path.name,
                disable=not progress,
            ) as bar:
                for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
                    if not chunk:
                        continue
                    f.write(chunk)
                    h.update(chunk)
                    bar.update(len(chunk))
    except req_exc.RequestException as e:
        part_path.unlink(missing_ok=True)
        raise ServerError(f"Failed to download {jar_url}: {e}") from e
    except ServerError:
        part_path.unlink(missing_ok=True)
        raise

    if expected is not None and h.hexdigest() != expected:
        part_path.unlink(missing_ok=True)
        raise ServerError(f"SHA-512 mismatch for {jar_url}")

    part_path.replace(path)
    logger.info("Downloaded %s to %s", jar_url, path)
    return path


class Server:
    def __init__(
        self,
        jar: Path | str,
        *,
        url: str = DEFAULT_URL,
        java: str = "java",
        extra_args: Sequence[str] = (),
        startup_timeout_s: float = 60.0,
        poll_interval_s: float = 0.5,
        transport: Transport | None = None,
    ) -> None:
        self.jar = Path(jar)
        self.url = url
        self.java = java
        self.extra_args = tuple(extra_args)
        self.startup_timeout_s = startup_timeout_s
        self.poll_interval_s = poll_interval_s
        self._transport = transport or RequestsTransport(timeout_s=5)
        self._proc: subprocess.Popen | None = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def command(self) -> list[str]:
        return [
            self.java,
            "-jar",
            str(self.jar),
            "--port",
            str(port_of(self.url)),
            *self.extra_args,
        ]

    def client(self) -> Client:
        return Client(self._transport, self.url)

    def start(self) -> None:
        if self.running:
            raise ServerError(f"tika-server already running (pid {self._proc.pid})")
        if not self.jar.exists():
            raise ServerError(f"Missing server jar: {self.jar}")

        cmd = self.command()
        logger.info("Starting %s", " ".join(cmd))
        try:
            self._proc = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise ServerError(f"Failed to start {self.java}: {e}") from e

        try:
            self._wait_ready()
        except ServerError:
            self.stop()
            raise

    def _wait_ready(self) -> None:
        proc = self._proc
        if proc is None:
            raise ServerError("tika-server is not running")
        client = self.client()
        deadline = time.monotonic() + self.startup_timeout_s
        while True:
            code = proc.poll()
            if code is not None:
                raise ServerError(f"tika-server exited with status {code}")
            try:
                version = client.version()
            except TikaError as e:
                if time.monotonic() >= deadline:
                    raise ServerError(
                        f"tika-server not ready after {self.startup_timeout_s}s: {e}"
                    ) from e
                time.sleep(self.poll_interval_s)
                continue
            logger.info("tika-server ready at %s (%s)", self.url, version.strip())
            return

    def stop(self, grace_s: float = 10.0) -> None:
        proc, self._proc = self._proc, None
        if proc is None or proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=grace_s)
        except subprocess.TimeoutExpired:
            logger.warning("tika-server did not exit after %ss, killing", grace_s)
            proc.kill()
            proc.wait()

    def __enter__(self) -> Server:
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
