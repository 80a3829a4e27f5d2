"""Concurrent artifact download service."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterator, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Any, Protocol

import requests

from node_bootstrap.artifact_catalog.artifact_models import ArtifactSpec

from .delivery_outcomes import InstalledArtifact

LOGGER = logging.getLogger(__name__)

STAGING_SUFFIX = ".part"


class DownloadError(Exception):
    """Raised when any artifact of a batch cannot be fetched."""

    def __init__(self, name: str, cause: BaseException) -> None:
        super().__init__(f"Download of '{name}' failed: {cause}")
        self.name = name
        self.cause = cause


class _TransferAborted(Exception):
    """Internal signal stopping a transfer after another one in the batch failed."""


class HttpResponse(Protocol):
    """Subset of `requests.Response` used while streaming an artifact."""

    def __enter__(self) -> HttpResponse: ...

    def __exit__(self, *exc_info: Any) -> Any: ...

    def raise_for_status(self) -> None: ...

    def iter_content(self, chunk_size: int) -> Iterator[bytes]: ...


class HttpSession(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol implemented by `requests.Session` and test fakes."""

    def get(self, url: str, *, stream: bool, timeout: float) -> HttpResponse: ...


class ArtifactFetcher:
    """Downloads a batch of artifacts concurrently; the batch succeeds or leaves nothing behind.

    A session created by the fetcher is closed by `close` or on leaving the `with` block;
    an injected session belongs to the caller.
    """

    def __init__(
        self,
        destination_dir: Path,
        *,
        session: HttpSession | None = None,
        timeout_seconds: float = 60.0,
        chunk_size: int = 64 * 1024,
        max_workers: int | None = None,
    ) -> None:
        self._destination_dir = destination_dir
        self._owned_session: requests.Session | None = None
        if session is None:
            self._owned_session = requests.Session()
            session = self._owned_session
        self._session: HttpSession = session
        self._timeout_seconds = timeout_seconds
        self._chunk_size = chunk_size
        self._max_workers = max_workers

    def __enter__(self) -> ArtifactFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owned_session is not None:
            self._owned_session.close()

    def fetch(self, specs: Sequence[ArtifactSpec]) -> tuple[InstalledArtifact, ...]:
        if not specs:
            return ()
        names = [spec.name for spec in specs]
        if len(set(names)) != len(names):
            raise ValueError(f"Artifact names must be unique per run: {names}")

        abort = threading.Event()
        futures: dict[ArtifactSpec, Future[InstalledArtifact]] = {}
        executor = ThreadPoolExecutor(
            max_workers=self._max_workers or len(specs), thread_name_prefix="artifact-fetch"
        )
        try:
            for spec in specs:
                futures[spec] = executor.submit(self._fetch_single, spec, abort)
            done, _ = wait(futures.values(), return_when=FIRST_EXCEPTION)
            if any(future.exception() is not None for future in done):
                abort.set()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        failure = _first_failure(specs, futures)
        if failure is not None:
            self._discard_batch(specs)
            spec, cause = failure
            LOGGER.debug("Download of %s from %s failed: %s", spec.name.value, spec.url, cause)
            raise DownloadError(spec.name.value, cause) from cause

        return tuple(futures[spec].result() for spec in specs)

    def _fetch_single(self, spec: ArtifactSpec, abort: threading.Event) -> InstalledArtifact:
        destination = self._destination_dir / spec.filename
        staging = destination.with_name(destination.name + STAGING_SUFFIX)
        if abort.is_set():
            raise _TransferAborted(spec.name.value)
        LOGGER.info("Downloading %s from %s", spec.name.value, spec.url)
        try:
            response = self._session.get(spec.url, stream=True, timeout=self._timeout_seconds)
            with response, staging.open("wb") as handle:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=self._chunk_size):
                    if abort.is_set():
                        raise _TransferAborted(spec.name.value)
                    if chunk:
                        handle.write(chunk)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(staging, destination)
        except Exception:
            staging.unlink(missing_ok=True)
            raise
        LOGGER.info("Downloaded %s to %s", spec.name.value, destination)
        return InstalledArtifact(name=spec.name, path=destination)

    def _discard_batch(self, specs: Sequence[ArtifactSpec]) -> None:
        for spec in specs:
            destination = self._destination_dir / spec.filename
            destination.unlink(missing_ok=True)
            destination.with_name(destination.name + STAGING_SUFFIX).unlink(missing_ok=True)


def _first_failure(
    specs: Sequence[ArtifactSpec], futures: dict[ArtifactSpec, Future[InstalledArtifact]]
) -> tuple[ArtifactSpec, BaseException] | None:
    for spec in specs:
        future = futures[spec]
        if future.cancelled():
            continue
        error = future.exception()
        if error is not None and not isinstance(error, _TransferAborted):
            return spec, error
    return None
