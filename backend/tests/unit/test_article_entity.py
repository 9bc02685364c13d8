"""Unit tests for Article lifecycle and tag rules."""

import pytest

from app.domain.entities import ArticleStatus, MediaFile, Tag
from app.domain.exceptions import InvalidStatusTransitionError
from tests.fakes import AUTHOR, make_article


def test_new_article_is_draft():
    article = make_article()

    assert article.status == ArticleStatus.DRAFT
    assert article.published_at is None
    assert article.is_owned_by(AUTHOR.id)


def test_publish_sets_published_at_only_once():
    article = make_article()
    article.publish()
    first = article.published_at

    article.unpublish()
    article.publish()

    assert article.status == ArticleStatus.PUBLISHED
    assert article.published_at == first


def test_archived_article_can_be_published_directly():
    article = make_article(status=ArticleStatus.ARCHIVED)

    article.publish()

    assert article.status == ArticleStatus.PUBLISHED
    assert article.published_at is not None


def test_unpublish_requires_published():
    with pytest.raises(InvalidStatusTransitionError):
        make_article().unpublish()


def test_archive_twice_is_rejected():
    article = make_article()
    article.archive()

    with pytest.raises(InvalidStatusTransitionError):
        article.archive()


def test_restore_returns_archived_to_draft():
    article = make_article(status=ArticleStatus.PUBLISHED)
    article.archive()
    article.restore()

    assert article.status == ArticleStatus.DRAFT


def test_restore_requires_archived():
    with pytest.raises(InvalidStatusTransitionError):
        make_article().restore()


def test_add_tags_skips_already_linked():
    article = make_article(tags=[Tag(id="t1", name="One")])

    added = article.add_tags([Tag(id="t1", name="One"), Tag(id="t2", name="Two"), Tag(id="t2", name="Two")])

    assert [t.id for t in added] == ["t2"]
    assert article.tag_ids == ["t1", "t2"]


def test_remove_tag_reports_whether_it_was_linked():
    article = make_article(tags=[Tag(id="t1", name="One")])

    assert article.remove_tag("t1") is True
    assert article.remove_tag("t1") is False
    assert article.tags == []


def test_media_files_lists_featured_first():
    def media(file_id):
        return MediaFile(id=file_id, url="u", filename="f", mimetype="m", size=0)

    article = make_article(featured_media=media("F"), images=[media("I")], videos=[media("V")])

    assert [f.id for f in article.media_files] == ["F", "I", "V"]
