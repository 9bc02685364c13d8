"""Unit tests for ArticleService reads, lifecycle, archive, delete and tag management."""

from datetime import datetime, timezone

import pytest

from app.application.services import ArticleService
from app.domain.entities import (
    ArticleFilters,
    ArticleListQuery,
    ArticleSearchQuery,
    ArticleStatus,
    MediaFile,
    Tag,
)
from app.domain.exceptions import ArticleWorkflowError, ErrorKind
from tests.fakes import (
    ADMIN,
    AUTHOR,
    EDITOR,
    OTHER_AUTHOR,
    FakeArticleRepository,
    FakeMediaStorage,
    make_article,
)


def _media(file_id: str) -> MediaFile:
    return MediaFile(id=file_id, url=f"/media/{file_id}", filename=f"{file_id}.bin", mimetype="image/png", size=1)


# ── Get ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_author_can_read_own_article(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article(AUTHOR))

    result = await service.get_article(AUTHOR, seeded.id)

    assert result.article.id == seeded.id
    assert result.related == []


@pytest.mark.asyncio
async def test_author_reading_foreign_article_is_forbidden(
    service: ArticleService, article_repo: FakeArticleRepository
):
    seeded = article_repo.seed(make_article(OTHER_AUTHOR))

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.get_article(AUTHOR, seeded.id)

    assert exc_info.value.kind == ErrorKind.FORBIDDEN


@pytest.mark.asyncio
async def test_get_missing_article_is_not_found(service: ArticleService):
    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.get_article(EDITOR, "missing")

    assert exc_info.value.kind == ErrorKind.NOT_FOUND
    assert exc_info.value.message == "Article not found"


@pytest.mark.asyncio
async def test_get_anonymous_is_unauthorized(service: ArticleService):
    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.get_article(None, "anything")

    assert exc_info.value.kind == ErrorKind.UNAUTHORIZED


@pytest.mark.asyncio
async def test_get_unexpected_error_is_internal(service: ArticleService, article_repo: FakeArticleRepository):
    article_repo.fail_get = RuntimeError("pool exhausted")

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.get_article(EDITOR, "any")

    assert exc_info.value.kind == ErrorKind.INTERNAL
    assert exc_info.value.message == "An unexpected error occurred while fetching the article"


@pytest.mark.asyncio
async def test_published_article_includes_related(service: ArticleService, article_repo: FakeArticleRepository):
    main = article_repo.seed(make_article(status=ArticleStatus.PUBLISHED, category_id="politics"))
    article_repo.seed(make_article(title="Same category", status=ArticleStatus.PUBLISHED, category_id="politics"))
    article_repo.seed(make_article(title="Draft sibling", category_id="politics"))
    article_repo.seed(make_article(title="Other desk", status=ArticleStatus.PUBLISHED, category_id="sport"))

    result = await service.get_article(EDITOR, main.id)

    assert [a.title for a in result.related] == ["Same category"]


@pytest.mark.asyncio
async def test_draft_article_has_no_related(service: ArticleService, article_repo: FakeArticleRepository):
    main = article_repo.seed(make_article(category_id="politics"))
    article_repo.seed(make_article(status=ArticleStatus.PUBLISHED, category_id="politics"))

    result = await service.get_article(EDITOR, main.id)

    assert result.related == []


# ── List / Search ────────────────────────────────────────────────────


@pytest.fixture
def mixed_authors(article_repo: FakeArticleRepository) -> None:
    article_repo.seed(make_article(AUTHOR, title="Mine 1"))
    article_repo.seed(make_article(AUTHOR, title="Mine 2"))
    article_repo.seed(make_article(OTHER_AUTHOR, title="Theirs"))


@pytest.mark.asyncio
@pytest.mark.usefixtures("mixed_authors")
async def test_author_listing_is_scoped_to_own_articles(service: ArticleService):
    page = await service.list_articles(AUTHOR, ArticleListQuery())

    assert page.total == 2
    assert {a.title for a in page.data} == {"Mine 1", "Mine 2"}


@pytest.mark.asyncio
@pytest.mark.usefixtures("mixed_authors")
async def test_author_filtering_by_other_author_is_forbidden(service: ArticleService):
    query = ArticleListQuery(filters=ArticleFilters(author_id=OTHER_AUTHOR.id))

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.list_articles(AUTHOR, query)

    assert exc_info.value.kind == ErrorKind.FORBIDDEN


@pytest.mark.asyncio
@pytest.mark.usefixtures("mixed_authors")
async def test_editor_lists_everything_with_pagination(service: ArticleService):
    page = await service.list_articles(EDITOR, ArticleListQuery(page=1, limit=2))

    assert page.total == 3
    assert len(page.data) == 2
    assert page.total_pages == 2


@pytest.mark.asyncio
async def test_author_listing_drops_rows_the_store_failed_to_filter(service: ArticleService):
    class LeakyRepository(FakeArticleRepository):
        async def list_articles(self, query):
            unfiltered = ArticleListQuery(page=query.page, limit=query.limit)
            return await super().list_articles(unfiltered)

    leaky = LeakyRepository()
    leaky.seed(make_article(AUTHOR, title="Mine"))
    leaky.seed(make_article(OTHER_AUTHOR, title="Theirs"))
    service._repository = leaky

    page = await service.list_articles(AUTHOR, ArticleListQuery(limit=10))

    assert [a.title for a in page.data] == ["Mine"]
    assert page.total == 1
    assert page.total_pages == 1


@pytest.mark.asyncio
async def test_search_matches_either_language(service: ArticleService, article_repo: FakeArticleRepository):
    article_repo.seed(make_article(title="Budget passes", title_ar="إقرار الميزانية"))
    article_repo.seed(make_article(title="Cup final", title_ar="نهائي الكأس"))

    english = await service.search_articles(AUTHOR, ArticleSearchQuery(query="budget"))
    arabic = await service.search_articles(AUTHOR, ArticleSearchQuery(query="الكأس"))

    assert [a.title for a in english.articles] == ["Budget passes"]
    assert [a.title for a in arabic.articles] == ["Cup final"]


# ── Lifecycle ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_publish_sets_published_at_once(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article())

    first = await service.publish_article(EDITOR, seeded.id)
    second = await service.publish_article(EDITOR, seeded.id)

    assert first.status == ArticleStatus.PUBLISHED
    assert first.published_at is not None
    assert second.published_at == first.published_at


@pytest.mark.asyncio
async def test_archive_then_unarchive_returns_to_draft_keeping_published_at(
    service: ArticleService, article_repo: FakeArticleRepository
):
    published_at = datetime(2024, 5, 1, tzinfo=timezone.utc)
    seeded = article_repo.seed(make_article(status=ArticleStatus.PUBLISHED, published_at=published_at))

    await service.archive_articles(EDITOR, [seeded.id])
    restored = await service.unarchive_article(EDITOR, seeded.id)

    assert restored.status == ArticleStatus.DRAFT
    assert restored.published_at == published_at


@pytest.mark.asyncio
async def test_unpublish_moves_published_to_draft(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article(status=ArticleStatus.PUBLISHED))

    article = await service.unpublish_article(ADMIN, seeded.id)

    assert article.status == ArticleStatus.DRAFT


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "action"),
    [
        (ArticleStatus.DRAFT, "unpublish_article"),
        (ArticleStatus.PUBLISHED, "unarchive_article"),
    ],
)
async def test_invalid_transitions_are_bad_requests(
    service: ArticleService, article_repo: FakeArticleRepository, status, action
):
    seeded = article_repo.seed(make_article(status=status))

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await getattr(service, action)(EDITOR, seeded.id)

    assert exc_info.value.kind == ErrorKind.BAD_REQUEST
    assert article_repo.stored(seeded.id).status == status


@pytest.mark.asyncio
async def test_authors_cannot_publish(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article(AUTHOR))

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.publish_article(AUTHOR, seeded.id)

    assert exc_info.value.kind == ErrorKind.FORBIDDEN


@pytest.mark.asyncio
async def test_publish_missing_article_is_not_found(service: ArticleService):
    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.publish_article(EDITOR, "missing")

    assert exc_info.value.kind == ErrorKind.NOT_FOUND


# ── Archive batch ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_archive_batch_skips_missing_and_already_archived(
    service: ArticleService, article_repo: FakeArticleRepository
):
    draft = article_repo.seed(make_article())
    archived = article_repo.seed(make_article(status=ArticleStatus.ARCHIVED))

    result = await service.archive_articles(EDITOR, [draft.id, archived.id, "missing", draft.id])

    assert result.total_processed == 3
    assert result.archived == 1
    assert article_repo.stored(draft.id).status == ArticleStatus.ARCHIVED


@pytest.mark.asyncio
async def test_archive_batch_with_nothing_eligible_fails(
    service: ArticleService, article_repo: FakeArticleRepository
):
    archived = article_repo.seed(make_article(status=ArticleStatus.ARCHIVED))

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.archive_articles(EDITOR, [archived.id, "missing"])

    assert exc_info.value.kind == ErrorKind.BAD_REQUEST
    assert "No eligible articles to archive" in exc_info.value.message


@pytest.mark.asyncio
async def test_archive_batch_requires_staff(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article(AUTHOR))

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.archive_articles(AUTHOR, [seeded.id])

    assert exc_info.value.kind == ErrorKind.FORBIDDEN


# ── Delete ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_deleting_draft_removes_its_media(
    service: ArticleService, article_repo: FakeArticleRepository, storage: FakeMediaStorage
):
    seeded = article_repo.seed(
        make_article(featured_media=_media("F"), images=[_media("I1"), _media("I2")], videos=[_media("V1")])
    )

    await service.delete_article(EDITOR, seeded.id)

    assert article_repo.stored(seeded.id) is None
    assert sorted(storage.deleted_ids) == ["F", "I1", "I2", "V1"]


@pytest.mark.asyncio
async def test_deleting_published_keeps_media(
    service: ArticleService, article_repo: FakeArticleRepository, storage: FakeMediaStorage
):
    seeded = article_repo.seed(make_article(status=ArticleStatus.PUBLISHED, images=[_media("I1")]))

    await service.delete_article(ADMIN, seeded.id)

    assert article_repo.stored(seeded.id) is None
    assert storage.deleted_ids == []


@pytest.mark.asyncio
async def test_delete_succeeds_when_storage_cleanup_fails(
    service: ArticleService, article_repo: FakeArticleRepository, storage: FakeMediaStorage
):
    storage.fail_deletes = {"I1"}
    seeded = article_repo.seed(make_article(images=[_media("I1"), _media("I2")]))

    await service.delete_article(EDITOR, seeded.id)

    assert article_repo.stored(seeded.id) is None
    assert storage.deleted_ids == ["I2"]


@pytest.mark.asyncio
async def test_delete_missing_article_is_not_found(service: ArticleService):
    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.delete_article(EDITOR, "missing")

    assert exc_info.value.kind == ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_delete_unexpected_error_is_internal(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article())
    article_repo.fail_delete = RuntimeError("locked")

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.delete_article(EDITOR, seeded.id)

    assert exc_info.value.kind == ErrorKind.INTERNAL
    assert exc_info.value.message == "Failed to delete article and associated files"


# ── Tags ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_assign_tags_links_existing_tags(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article(AUTHOR, tags=[Tag(id="t-economy", name="Economy")]))

    article = await service.assign_tags(AUTHOR, seeded.id, ["t-economy", "t-sport"])

    assert article.tag_ids == ["t-economy", "t-sport"]


@pytest.mark.asyncio
async def test_assign_unknown_tag_is_not_found(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article(AUTHOR))

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.assign_tags(EDITOR, seeded.id, ["t-sport", "nope"])

    assert exc_info.value.kind == ErrorKind.NOT_FOUND
    assert article_repo.stored(seeded.id).tags == []


@pytest.mark.asyncio
async def test_assign_tags_on_foreign_article_is_forbidden(
    service: ArticleService, article_repo: FakeArticleRepository
):
    seeded = article_repo.seed(make_article(OTHER_AUTHOR))

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.assign_tags(AUTHOR, seeded.id, ["t-sport"])

    assert exc_info.value.kind == ErrorKind.FORBIDDEN


@pytest.mark.asyncio
async def test_remove_tag_unlinks_it(service: ArticleService, article_repo: FakeArticleRepository, tag_repo):
    seeded = article_repo.seed(
        make_article(tags=[Tag(id="t-economy", name="Economy"), Tag(id="t-sport", name="Sport")])
    )

    await service.remove_tag(EDITOR, seeded.id, "t-economy")

    assert article_repo.stored(seeded.id).tag_ids == ["t-sport"]
    assert await tag_repo.get_by_id("t-economy") is not None


@pytest.mark.asyncio
async def test_remove_tag_not_linked_is_not_found(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article())

    with pytest.raises(ArticleWorkflowError) as exc_info:
        await service.remove_tag(EDITOR, seeded.id, "t-sport")

    assert exc_info.value.kind == ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_publish_archived_article_directly(service: ArticleService, article_repo: FakeArticleRepository):
    seeded = article_repo.seed(make_article(status=ArticleStatus.ARCHIVED))

    article = await service.publish_article(EDITOR, seeded.id)

    assert article.status == ArticleStatus.PUBLISHED
    assert article.published_at is not None
