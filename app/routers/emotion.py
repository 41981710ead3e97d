from fastapi import APIRouter, Depends

from app.schemas.emotion import EmotionOut
from app.core.biz_response import BizResponse
from app.service import emotion_svc
from app.service.sentiment_client import SentimentClient, get_sentiment_client

from app.storage.database import get_emotion_repo, get_post_repo, get_comment_repo
from app.storage.emotion.emotion_interface import IEmotionRepository
from app.storage.post.post_interface import IPostRepository
from app.storage.comment.comment_interface import ICommentRepository

from app.core.exceptions import PostNotFound, CommentNotFound, SentimentAnalysisError
from app.core.logx import logger

emotion_router = APIRouter(prefix="/emotion", tags=["emotion"])


@emotion_router.get("/post/{post_id}", response_model=EmotionOut)
def get_post_emotion(
    post_id: str,
    emotion_repo: IEmotionRepository = Depends(get_emotion_repo),
    post_repo: IPostRepository = Depends(get_post_repo),
    client: SentimentClient = Depends(get_sentiment_client),
):
    """
    获取帖子的情感分析结果，没有缓存时调用外部服务分析并缓存
    """
    try:
        emotion = emotion_svc.get_or_analyze_post(
            emotion_repo=emotion_repo,
            post_repo=post_repo,
            client=client,
            post_id=post_id,
            to_dict=True,
        )
        return BizResponse(data=emotion)
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except SentimentAnalysisError as e:
        return BizResponse(data=None, msg=str(e), status_code=502)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@emotion_router.get("/comment/{comment_id}", response_model=EmotionOut)
def get_comment_emotion(
    comment_id: str,
    emotion_repo: IEmotionRepository = Depends(get_emotion_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
    client: SentimentClient = Depends(get_sentiment_client),
):
    """
    获取评论的情感分析结果，没有缓存时调用外部服务分析并缓存
    """
    try:
        emotion = emotion_svc.get_or_analyze_comment(
            emotion_repo=emotion_repo,
            comment_repo=comment_repo,
            client=client,
            comment_id=comment_id,
            to_dict=True,
        )
        return BizResponse(data=emotion)
    except CommentNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except SentimentAnalysisError as e:
        return BizResponse(data=None, msg=str(e), status_code=502)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)
