import json

import httpx
import pytest

from app.core.exceptions import CommentNotFound, PostNotFound, SentimentAnalysisError
from app.schemas.comment import CommentCreate
from app.service import comment_svc, emotion_svc, user_svc
from app.service.sentiment_client import SentimentClient


def make_client(transport) -> SentimentClient:
    return SentimentClient(url="http://sentiment.test/analyze_sentiment", transport=transport)


# ------------------------------ 客户端 ------------------------------

def test_client_posts_text_and_parses_result(sentiment_client, sentiment_calls):
    result = sentiment_client.analyze("今天食堂的饭很好吃")
    assert result.sentiment == "positive"
    assert result.confidence == pytest.approx(0.91)

    assert len(sentiment_calls) == 1
    request = sentiment_calls[0]
    assert request.method == "POST"
    assert request.url.path == "/analyze_sentiment"
    assert json.loads(request.content) == {"text": "今天食堂的饭很好吃"}


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"success": False, "error": "model not loaded"}, 200),
        ({"success": True, "sentiment": "positive"}, 200),
        ({"detail": "boom"}, 500),
        ({"unexpected": "shape"}, 200),
    ],
)
def test_client_failures_raise(sentiment_transport, payload, status_code):
    client = make_client(sentiment_transport(payload, status_code))
    with pytest.raises(SentimentAnalysisError):
        client.analyze("text")


def test_client_network_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(SentimentAnalysisError):
        make_client(httpx.MockTransport(handler)).analyze("text")


# ------------------------------ 缓存 ------------------------------

def test_post_emotion_is_cached(alice, make_post, emotion_repo, post_repo, sentiment_client, sentiment_calls):
    post = make_post(alice, content="great day on campus")

    first = emotion_svc.get_or_analyze_post(emotion_repo, post_repo, sentiment_client, post.pid, to_dict=False)
    second = emotion_svc.get_or_analyze_post(emotion_repo, post_repo, sentiment_client, post.pid, to_dict=False)

    assert len(sentiment_calls) == 1
    assert first.eid == second.eid
    assert first.text == "great day on campus"
    assert first.sentiment == "positive"
    assert first.probabilities["negative"] == pytest.approx(0.03)


def test_failed_analysis_is_not_cached(alice, make_post, emotion_repo, post_repo, sentiment_transport):
    post = make_post(alice)
    failing = make_client(sentiment_transport({"success": False, "error": "busy"}))

    with pytest.raises(SentimentAnalysisError):
        emotion_svc.get_or_analyze_post(emotion_repo, post_repo, failing, post.pid)
    assert emotion_repo.get_by_post_id(post.pid) is None


def test_missing_targets_are_not_found(emotion_repo, post_repo, comment_repo, sentiment_client, sentiment_calls):
    with pytest.raises(PostNotFound):
        emotion_svc.get_or_analyze_post(emotion_repo, post_repo, sentiment_client, "no-post")
    with pytest.raises(CommentNotFound):
        emotion_svc.get_or_analyze_comment(emotion_repo, comment_repo, sentiment_client, "no-comment")
    assert sentiment_calls == []


def test_comment_emotion_uses_raw_content_and_feeds_user_stats(
    alice, bob, make_post, uow, user_repo, post_repo, comment_repo, stats_repo, emotion_repo, sentiment_client,
):
    post = make_post(alice)
    comment = comment_svc.create_comment(
        uow, user_repo, post_repo, comment_repo, stats_repo, bob,
        CommentCreate(post_id=post.pid, content="love it"), to_dict=False,
    )

    emotion = emotion_svc.get_or_analyze_comment(emotion_repo, comment_repo, sentiment_client, comment.cid, to_dict=False)
    assert emotion.comment_id == comment.cid
    assert emotion.post_id is None
    assert emotion.text == "love it"

    emotion_svc.get_or_analyze_post(emotion_repo, post_repo, sentiment_client, post.pid)

    bob_stats = user_svc.get_user_emotion_stats(user_repo, emotion_repo, bob.uid, to_dict=False)
    assert bob_stats.post_stats == {}
    assert bob_stats.comment_stats == {"positive": 1}
    assert bob_stats.total_stats == {"positive": 1}

    alice_stats = user_svc.get_user_emotion_stats(user_repo, emotion_repo, alice.uid, to_dict=False)
    assert alice_stats.post_stats == {"positive": 1}
    assert alice_stats.total_stats == {"positive": 1}
