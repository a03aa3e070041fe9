import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .models import RequestContext


@contextmanager
def request_workspace(root: Path, context: RequestContext) -> Iterator[Path]:
    """
    Temporary directory for one request, namespaced by its request id.

    The directory is removed on every exit path. Cleanup failures are logged
    and never raised, so they cannot change a response.
    """
    path = root / context.request_id
    path.mkdir(parents=True)
    context.log.debug('Workspace created at %s', path)
    try:
        yield path
    finally:
        try:
            shutil.rmtree(path)
        except OSError as exc:
            context.log.error('Failed to clean up workspace %s: %s', path, exc)
        else:
            context.log.debug('Workspace %s removed', path)
