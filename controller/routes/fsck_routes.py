"""Server-side fsck endpoint."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from common.logging_config import get_logger
from controller.config import FSCK_QUARANTINE_DIR
from controller.namespace import Namespace
from controller.service_locator import get_namespace
from fsck.checker import FsckOptions, NamespaceChecker

logger = get_logger(__name__)

router = APIRouter(tags=["Fsck"])

EXIT_CODE_HEADER = "X-Fsck-Exit-Code"


@router.get("/fsck", response_class=PlainTextResponse)
def run_fsck(
    path: str = Query("/", description="Path to check"),
    move: bool = Query(False),
    delete: bool = Query(False),
    openforwrite: bool = Query(False),
    corruptfiles: bool = Query(False),
    files: bool = Query(False),
    blocks: bool = Query(False),
    locations: bool = Query(False),
    namespace: Namespace = Depends(get_namespace)
):
    """
    Run fsck inside the namespace service and return the plain-text report.

    Parameters mirror the command-line options. The exit code the
    command-line tool would return is sent in the X-Fsck-Exit-Code header.

    Raises:
        - 400: Invalid path or unsupported option combination
    """
    options = FsckOptions(
        path=path,
        move=move,
        delete=delete,
        open_for_write=openforwrite,
        list_corrupt_files=corruptfiles,
        show_files=files,
        show_blocks=blocks,
        show_locations=locations,
        quarantine_dir=FSCK_QUARANTINE_DIR,
    )
    result = NamespaceChecker(namespace, options).run()
    logger.info(f"Server-side fsck of {options.path}: {result.status.value}")
    return PlainTextResponse(
        result.output,
        headers={EXIT_CODE_HEADER: str(result.exit_code)}
    )
