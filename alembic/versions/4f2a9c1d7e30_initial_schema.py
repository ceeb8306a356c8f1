"""Initial schema

Revision ID: 4f2a9c1d7e30
Revises:
Create Date: 2026-10-18 10:12:44.318204

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4f2a9c1d7e30"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
    ]


def _user_fk(column: str, index: bool = True) -> sa.Column:
    return sa.Column(column, sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=index)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True, index=True),
        sa.Column("username", sa.String(length=50), nullable=False, unique=True, index=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "password_reset_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _user_fk("user_id"),
        sa.Column("purpose", sa.Enum("reset", "change", name="tokenpurpose"), nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False, index=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_password_reset_tokens_user_unused", "password_reset_tokens", ["user_id", "used_at"]
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _user_fk("user_id"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "post_likes",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column(
            "post_id",
            sa.Integer(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        _user_fk("user_id"),
        *_timestamps(),
        sa.UniqueConstraint("post_id", "user_id", name="uq_post_like_user"),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column(
            "post_id",
            sa.Integer(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        _user_fk("user_id"),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
    )
    for table, extra in (("comment_replies", "content"), ("comment_reactions", "reaction")):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, index=True),
            sa.Column(
                "comment_id",
                sa.Integer(),
                sa.ForeignKey("comments.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            _user_fk("user_id"),
            sa.Column(extra, sa.Text() if extra == "content" else sa.String(length=50), nullable=False),
            *_timestamps(),
        )

    op.create_table(
        "follows",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _user_fk("follower_id"),
        _user_fk("following_id"),
        *_timestamps(),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
    )
    op.create_table(
        "friends",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _user_fk("user_id"),
        _user_fk("friend_id"),
        sa.Column("status", sa.String(length=20), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "conversations",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _user_fk("user1_id"),
        _user_fk("user2_id"),
        *_timestamps(),
    )
    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column(
            "conversation_id",
            sa.Integer(),
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        _user_fk("sender_id"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _user_fk("recipient_id"),
        _user_fk("actor_id"),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("target_type", sa.String(length=50), nullable=False),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "is_read", sa.Boolean(), nullable=False, server_default=sa.false(), index=True
        ),
        *_timestamps(),
    )

    op.create_table(
        "user_inquiries",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        _user_fk("user_id"),
        sa.Column("title", sa.String(length=150), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "in_progress", "resolved", name="inquirystatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("response", sa.Text(), nullable=True),
        sa.Column("attachments", sa.JSON(), nullable=False),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status_changed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_viewed_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    for table in (
        "user_inquiries",
        "notifications",
        "messages",
        "conversations",
        "friends",
        "follows",
        "comment_reactions",
        "comment_replies",
        "comments",
        "post_likes",
        "posts",
        "password_reset_tokens",
        "users",
    ):
        op.drop_table(table)
    op.execute("DROP TYPE IF EXISTS inquirystatus")
    op.execute("DROP TYPE IF EXISTS tokenpurpose")
