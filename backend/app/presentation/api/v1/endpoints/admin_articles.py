"""Admin article endpoints — create, edit, lifecycle and tag management."""

import logging
import math

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, status
from starlette.datastructures import UploadFile

from app.application.schemas import (
    ArchiveArticlesRequest,
    ArchiveArticlesResponse,
    ArticleCreate,
    ArticleDetailResponse,
    ArticleListItem,
    ArticleResponse,
    ArticleUpdate,
    AssignTagsRequest,
    PaginatedArticleResponse,
    PaginationMetadata,
    RelatedArticleSchema,
    SearchArticlesResponse,
)
from app.application.services import ArticleService, IncomingFile, MediaBatch
from app.config import Settings, get_settings
from app.domain.entities import (
    ArticleFilters,
    ArticleListQuery,
    ArticleSearchQuery,
    ArticleStatus,
    User,
)
from app.domain.exceptions import ArticleWorkflowError, ErrorKind
from app.infrastructure.dependencies import get_article_service, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/articles", tags=["Admin Articles"])

_STATUS_BY_KIND = {
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# ── Helpers ──────────────────────────────────────────────────────────

def _http_error(exc: ArticleWorkflowError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=exc.message,
    )


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def _read_files(
    items: list,
    field: str,
    not_a_file_message: str,
    max_count: int,
    max_bytes: int,
) -> list[IncomingFile]:
    """Validate one multipart file field and read its uploads into memory."""
    uploads: list[UploadFile] = []
    for item in items:
        if isinstance(item, str):
            raise _bad_request(not_a_file_message)
        uploads.append(item)

    if len(uploads) > max_count:
        raise _bad_request(f"Too many files in '{field}' (maximum {max_count})")

    def too_large(upload: UploadFile) -> HTTPException:
        return _bad_request(
            f"File '{upload.filename}' exceeds the {max_bytes // (1024 * 1024)} MB upload limit"
        )

    # Reject on the size multipart parsing recorded before any upload is read into memory
    for upload in uploads:
        if upload.size is not None and upload.size > max_bytes:
            raise too_large(upload)

    files: list[IncomingFile] = []
    for upload in uploads:
        content = await upload.read(max_bytes + 1)
        if len(content) > max_bytes:
            raise too_large(upload)
        files.append(
            IncomingFile(
                content=content,
                filename=upload.filename or "untitled",
                mimetype=upload.content_type or "application/octet-stream",
            )
        )
    return files


async def _read_media(request: Request, settings: Settings) -> MediaBatch:
    """Collect ``featuredMedia``, ``images`` and ``videos`` from the multipart body."""
    form = await request.form()
    max_bytes = settings.max_upload_size_bytes

    featured = await _read_files(
        form.getlist("featuredMedia"),
        "featuredMedia",
        "Featured media must be a file upload, not a string",
        max_count=1,
        max_bytes=max_bytes,
    )
    images = await _read_files(
        form.getlist("images"),
        "images",
        "Images must be file uploads, not strings",
        max_count=settings.max_images_per_article,
        max_bytes=max_bytes,
    )
    videos = await _read_files(
        form.getlist("videos"),
        "videos",
        "Videos must be file uploads, not strings",
        max_count=settings.max_videos_per_article,
        max_bytes=max_bytes,
    )
    return MediaBatch(featured=featured[0] if featured else None, images=images, videos=videos)


# ── Create / Update ──────────────────────────────────────────────────

@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    request: Request,
    title: str = Form(..., min_length=1, max_length=255),
    title_ar: str = Form(..., alias="titleAr", min_length=1, max_length=255),
    content: str | None = Form(None),
    content_ar: str | None = Form(None, alias="contentAr"),
    summary: str | None = Form(None),
    summary_ar: str | None = Form(None, alias="summaryAr"),
    category_id: str | None = Form(None, alias="categoryId"),
    article_status: ArticleStatus = Form(ArticleStatus.DRAFT, alias="status"),
    tags: str | None = Form(None),
    tag_ids: list[str] | None = Form(None, alias="tagIds"),
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
    settings: Settings = Depends(get_settings),
) -> ArticleResponse:
    """Create an article with inline tags and media in one multipart request."""
    media = await _read_media(request, settings)
    data = ArticleCreate(
        title=title,
        title_ar=title_ar,
        content=content,
        content_ar=content_ar,
        summary=summary,
        summary_ar=summary_ar,
        category_id=category_id,
        status=article_status,
        tags=tags,
        tag_ids=tag_ids,
    )
    try:
        article = await service.create_article(user, data, media)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e
    return ArticleResponse.model_validate(article)


# ── Read ─────────────────────────────────────────────────────────────

@router.get("", response_model=PaginatedArticleResponse)
async def list_articles(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    status_filter: ArticleStatus | None = Query(None, alias="status"),
    category_id: str | None = Query(None, alias="categoryId"),
    tag_id: str | None = Query(None, alias="tagId"),
    author_id: str | None = Query(None, alias="authorId"),
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
    settings: Settings = Depends(get_settings),
) -> PaginatedArticleResponse:
    """List articles with filters and pagination. Authors only see their own."""
    query = ArticleListQuery(
        filters=ArticleFilters(
            status=status_filter,
            category_id=category_id,
            tag_id=tag_id,
            author_id=author_id,
        ),
        page=page,
        limit=limit or settings.default_page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    try:
        result = await service.list_articles(user, query)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e

    return PaginatedArticleResponse(
        data=[ArticleListItem.model_validate(a) for a in result.data],
        metadata=PaginationMetadata(
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
        ),
    )


@router.get("/search", response_model=SearchArticlesResponse)
async def search_articles(
    query: str = Query(""),
    status_filter: ArticleStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, alias="pageSize", ge=1, le=100),
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
    settings: Settings = Depends(get_settings),
) -> SearchArticlesResponse:
    """Free-text search over titles, summaries and content in both languages."""
    size = page_size or settings.default_page_size
    try:
        result = await service.search_articles(
            user,
            ArticleSearchQuery(query=query, status=status_filter, page=page, page_size=size),
        )
    except ArticleWorkflowError as e:
        raise _http_error(e) from e

    return SearchArticlesResponse(
        articles=[ArticleListItem.model_validate(a) for a in result.articles],
        page=page,
        page_size=size,
        total_results=result.total_results,
        total_pages=math.ceil(result.total_results / size),
    )


@router.get("/{article_id}", response_model=ArticleDetailResponse)
async def get_article(
    article_id: str,
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
) -> ArticleDetailResponse:
    """Retrieve one article plus related published articles."""
    try:
        result = await service.get_article(user, article_id)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e

    detail = ArticleDetailResponse.model_validate(result.article)
    detail.related_articles = [RelatedArticleSchema.model_validate(r) for r in result.related]
    return detail


# ── Lifecycle ────────────────────────────────────────────────────────
# The batch route is registered before "/{article_id}" so "archive" is not read as an ID.

@router.patch("/archive", response_model=ArchiveArticlesResponse)
async def archive_articles(
    body: ArchiveArticlesRequest,
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
) -> ArchiveArticlesResponse:
    """Archive several articles. Missing or already archived ones are skipped."""
    try:
        result = await service.archive_articles(user, body.article_ids)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e
    return ArchiveArticlesResponse(total_processed=result.total_processed, archived=result.archived)


@router.patch("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: str,
    request: Request,
    title: str | None = Form(None, min_length=1, max_length=255),
    title_ar: str | None = Form(None, alias="titleAr", min_length=1, max_length=255),
    content: str | None = Form(None),
    content_ar: str | None = Form(None, alias="contentAr"),
    summary: str | None = Form(None),
    summary_ar: str | None = Form(None, alias="summaryAr"),
    category_id: str | None = Form(None, alias="categoryId"),
    tags: list[str] | None = Form(None),
    removed_images: list[str] | None = Form(None, alias="removedImages"),
    removed_videos: list[str] | None = Form(None, alias="removedVideos"),
    removed_tags: list[str] | None = Form(None, alias="removedTags"),
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
    settings: Settings = Depends(get_settings),
) -> ArticleResponse:
    """Partially update an article, add or remove media and tags."""
    media = await _read_media(request, settings)
    data = ArticleUpdate(
        title=title,
        title_ar=title_ar,
        content=content,
        content_ar=content_ar,
        summary=summary,
        summary_ar=summary_ar,
        category_id=category_id,
        tags=tags,
        removed_images=removed_images,
        removed_videos=removed_videos,
        removed_tags=removed_tags,
    )
    try:
        article = await service.update_article(user, article_id, data, media)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e
    return ArticleResponse.model_validate(article)


@router.patch("/{article_id}/publish", response_model=ArticleResponse)
async def publish_article(
    article_id: str,
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    try:
        article = await service.publish_article(user, article_id)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e
    return ArticleResponse.model_validate(article)


@router.patch("/{article_id}/unpublish", response_model=ArticleResponse)
async def unpublish_article(
    article_id: str,
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    try:
        article = await service.unpublish_article(user, article_id)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e
    return ArticleResponse.model_validate(article)


@router.patch("/{article_id}/unarchive", response_model=ArticleResponse)
async def unarchive_article(
    article_id: str,
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Bring an archived article back to draft."""
    try:
        article = await service.unarchive_article(user, article_id)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e
    return ArticleResponse.model_validate(article)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: str,
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
) -> None:
    """Delete an article. Media of draft articles is removed from storage too."""
    try:
        await service.delete_article(user, article_id)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e


# ── Tags ─────────────────────────────────────────────────────────────

@router.post("/{article_id}/tags", response_model=ArticleResponse)
async def assign_tags(
    article_id: str,
    body: AssignTagsRequest,
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Link existing tags to an article."""
    try:
        article = await service.assign_tags(user, article_id, body.tag_ids)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e
    return ArticleResponse.model_validate(article)


@router.delete("/{article_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tag(
    article_id: str,
    tag_id: str,
    user: User | None = Depends(get_current_user),
    service: ArticleService = Depends(get_article_service),
) -> None:
    """Unlink a tag from an article; the tag itself is kept."""
    try:
        await service.remove_tag(user, article_id, tag_id)
    except ArticleWorkflowError as e:
        raise _http_error(e) from e
