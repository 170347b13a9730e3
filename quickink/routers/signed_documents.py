"""
Signed document API router.
Paths: /v1/signed-documents
"""
from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool

from quickink.config import get_settings, Settings
from quickink.exceptions import StorageException, to_app_exception
from quickink.models import (
    SignedDocumentRequest,
    SignedDocumentResponse,
    StoreSignedDocumentRequest,
)
from quickink.pdf import (
    GenerationContext,
    SignedDocumentError,
    generate_signed_document,
    validate_signature_info,
)
from quickink.storage import (
    StorageClient,
    build_signed_document_path,
    get_storage_client,
    safe_filename,
)
from quickink.utils.logging import get_logger, mask_email, set_context

logger = get_logger(__name__)

router = APIRouter(
    prefix="/v1/signed-documents",
    tags=["signed-documents"],
)


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address, handling proxies and Cloud Run.
    """
    # Cloud Run / load balancer headers
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP (original client)
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def get_generation_context(settings: Settings = Depends(get_settings)) -> GenerationContext:
    return GenerationContext.from_settings(settings)


@router.post(
    "/render",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def render_signed_document(
    body: SignedDocumentRequest,
    request: Request,
    context: GenerationContext = Depends(get_generation_context),
):
    """Generate the signed PDF and return it directly."""
    info = body.to_signature_info(client_ip=get_client_ip(request))

    try:
        validate_signature_info(info)
        pdf_bytes = await generate_signed_document(
            body.source_document_url,
            info,
            context=context,
            audit_entries=body.to_audit_entries(),
        )
    except SignedDocumentError as e:
        raise to_app_exception(e)

    filename = f"{safe_filename(body.document_title)}_signed.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("", response_model=SignedDocumentResponse)
async def store_signed_document(
    body: StoreSignedDocumentRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
    context: GenerationContext = Depends(get_generation_context),
    storage: StorageClient = Depends(get_storage_client),
):
    """
    Generate the signed PDF and upload it to storage.

    A generation failure is reported in the response body unless
    PDF_FAILURE_IS_FATAL is set, so the signature itself can still be recorded.
    """
    set_context(document_id=body.document_id)
    info = body.to_signature_info(client_ip=get_client_ip(request))

    logger.info(
        f"Generating signed document for {mask_email(info.signer_email)} "
        f"({'source PDF' if body.source_document_url else 'certificate'})"
    )

    try:
        validate_signature_info(info)
        pdf_bytes = await generate_signed_document(
            body.source_document_url,
            info,
            context=context,
            audit_entries=body.to_audit_entries(),
        )
    except SignedDocumentError as e:
        if settings.pdf_failure_is_fatal:
            raise to_app_exception(e)
        logger.warning(f"Signed PDF generation failed, continuing without it: {e.code} - {e.message}")
        return SignedDocumentResponse(
            document_id=body.document_id,
            generated=False,
            error=e.code,
        )

    path = build_signed_document_path(
        body.document_id,
        body.document_title,
        folder=settings.signed_documents_folder,
    )
    try:
        url = await run_in_threadpool(storage.upload_bytes, pdf_bytes, path, "application/pdf")
    except Exception as e:
        logger.exception("Failed to upload signed document")
        raise StorageException(f"Failed to upload signed document: {e}")

    return SignedDocumentResponse(
        document_id=body.document_id,
        generated=True,
        signed_pdf_url=url,
        path=path,
    )
