from django.contrib import admin

from .models import Comment, Post, Reaction


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ("id", "author", "post_type", "score", "likes_count", "comments_count", "created_at")
    list_filter = ("post_type",)
    search_fields = ("content", "author__email")


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("id", "post", "author", "parent", "created_at")
    search_fields = ("content",)


admin.site.register(Reaction)
