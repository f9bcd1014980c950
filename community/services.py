"""Reactions and comments on community posts.

Counters on `Post` are recomputed from the rows after each write (no
locking), so they are correct once concurrent writers have finished.
"""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction

from accounts.identity import identity_for
from activity.models import Notification
from activity.services import notify_users
from config.results import NOT_FOUND, PERMISSION_DENIED, QUERY_FAILED, VALIDATION, Result

from .models import Comment, Post, Reaction

logger = logging.getLogger(__name__)
User = get_user_model()

COMMENT_MAX_LENGTH = 2000


def refresh_counters(post_id) -> None:
    Post.objects.filter(pk=post_id).update(
        likes_count=Reaction.objects.filter(post_id=post_id).count(),
        comments_count=Comment.objects.filter(post_id=post_id).count(),
    )


def _display_name(user_id) -> str:
    user = User.objects.select_related("profile").filter(pk=user_id).first()
    return identity_for(user).display_name if user else f"User {user_id}"


def _notify_author(post: Post, actor_id, title: str, message: str) -> None:
    if str(post.author_id) == str(actor_id):
        return
    notify_users(
        [post.author_id],
        Notification.TYPE_COMMUNITY,
        title,
        message,
        link=f"/api/v1/posts/{post.pk}/",
        actor_id=actor_id,
    )


def react_to_post(post_id, user_id, reaction_type: str = Reaction.TYPE_LIKE) -> Result:
    """Create or change the user's single reaction on a post."""
    if reaction_type not in dict(Reaction.TYPE_CHOICES):
        return Result.failure(VALIDATION, f"Unknown reaction: {reaction_type}")
    try:
        post = Post.objects.filter(pk=post_id).first()
        if post is None:
            return Result.failure(NOT_FOUND, "Post not found.")
        with transaction.atomic():
            reaction, created = Reaction.objects.update_or_create(
                post=post, user_id=user_id, defaults={"reaction_type": reaction_type}
            )
            refresh_counters(post.pk)
        post.refresh_from_db(fields=["likes_count"])
    except DatabaseError:
        logger.exception("Reacting to post %s failed", post_id)
        return Result.failure(QUERY_FAILED, "Failed to save reaction.")
    if created:
        name = _display_name(user_id)
        _notify_author(post, user_id, "New reaction", f"{name} reacted to your post.")
    return Result.success({"post_id": post.pk, "reaction_type": reaction.reaction_type, "likes_count": post.likes_count})


def remove_reaction(post_id, user_id) -> Result:
    try:
        if not Post.objects.filter(pk=post_id).exists():
            return Result.failure(NOT_FOUND, "Post not found.")
        with transaction.atomic():
            Reaction.objects.filter(post_id=post_id, user_id=user_id).delete()
            refresh_counters(post_id)
        likes = Post.objects.values_list("likes_count", flat=True).get(pk=post_id)
    except DatabaseError:
        logger.exception("Removing reaction on post %s failed", post_id)
        return Result.failure(QUERY_FAILED, "Failed to remove reaction.")
    return Result.success({"post_id": int(post_id), "likes_count": likes})


def add_comment(post_id, user_id, content: str, parent_id=None) -> Result:
    """Add a comment or, with `parent_id`, a reply on the same post."""
    content = (content or "").strip()
    if not content:
        return Result.failure(VALIDATION, "Comment content is required.")
    if len(content) > COMMENT_MAX_LENGTH:
        return Result.failure(VALIDATION, f"Comments must be at most {COMMENT_MAX_LENGTH} characters.")
    try:
        post = Post.objects.filter(pk=post_id).first()
        if post is None:
            return Result.failure(NOT_FOUND, "Post not found.")
        parent = None
        if parent_id:
            parent = Comment.objects.filter(pk=parent_id).first()
            if parent is None or parent.post_id != post.pk:
                return Result.failure(VALIDATION, "Parent comment must belong to the same post.")
        with transaction.atomic():
            comment = Comment.objects.create(post=post, author_id=user_id, parent=parent, content=content)
            refresh_counters(post.pk)
    except DatabaseError:
        logger.exception("Commenting on post %s failed", post_id)
        return Result.failure(QUERY_FAILED, "Failed to add comment.")
    name = _display_name(user_id)
    _notify_author(post, user_id, "New comment", f"{name} commented on your post.")
    if parent is not None and str(parent.author_id) not in (str(user_id), str(post.author_id)):
        notify_users(
            [parent.author_id],
            Notification.TYPE_COMMUNITY,
            "New reply",
            f"{name} replied to your comment.",
            link=f"/api/v1/posts/{post.pk}/",
            actor_id=user_id,
        )
    return Result.success(comment)


def delete_comment(comment_id, user_id) -> Result:
    """Delete the user's own comment together with its replies."""
    try:
        comment = Comment.objects.filter(pk=comment_id).first()
        if comment is None:
            return Result.failure(NOT_FOUND, "Comment not found.")
        if str(comment.author_id) != str(user_id):
            return Result.failure(PERMISSION_DENIED, "You can only delete your own comments.")
        post_id = comment.post_id
        with transaction.atomic():
            comment.delete()
            refresh_counters(post_id)
    except DatabaseError:
        logger.exception("Deleting comment %s failed", comment_id)
        return Result.failure(QUERY_FAILED, "Failed to delete comment.")
    return Result.success({"id": int(comment_id), "post_id": post_id})
