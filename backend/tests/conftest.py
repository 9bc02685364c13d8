"""Shared fixtures: an ArticleService wired to in-memory fakes."""

import pytest

from app.application.services import (
    ArticleMutationMerger,
    ArticleService,
    MediaUploadCoordinator,
    TagResolver,
)
from app.domain.entities import Tag
from tests.fakes import FakeArticleRepository, FakeMediaStorage, FakeTagRepository


@pytest.fixture
def tag_repo() -> FakeTagRepository:
    return FakeTagRepository(
        [
            Tag(id="t-economy", name="Economy", name_ar="اقتصاد"),
            Tag(id="t-sport", name="Sport", name_ar="رياضة"),
        ]
    )


@pytest.fixture
def article_repo(tag_repo: FakeTagRepository) -> FakeArticleRepository:
    return FakeArticleRepository(tag_repo)


@pytest.fixture
def storage() -> FakeMediaStorage:
    return FakeMediaStorage()


@pytest.fixture
def service(
    article_repo: FakeArticleRepository,
    tag_repo: FakeTagRepository,
    storage: FakeMediaStorage,
) -> ArticleService:
    return ArticleService(
        repository=article_repo,
        tag_resolver=TagResolver(tag_repo),
        media=MediaUploadCoordinator(uploader=storage, deleter=storage),
        merger=ArticleMutationMerger(),
        related_limit=4,
    )
