from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
)

metadata = MetaData()

# Signal producers own these two tables; the pipeline only reads them.
trending_complaints = Table(
    "trending_complaints",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("topic", Text, nullable=False),
    Column("category", String, nullable=False, default="general"),
    Column("region", String, nullable=True),
    Column("trend_strength", Float, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_trending_complaints_created", "created_at"),
)

# Aggregated per topic, no stable row id.
sentiment_trends = Table(
    "sentiment_trends",
    metadata,
    Column("topic", Text, primary_key=True),
    Column("created_at", DateTime(timezone=True), primary_key=True),
    Column("topic_category", String, nullable=False, default="general"),
    Column("region", String, nullable=True),
    Column("trend_strength", Float, nullable=False),
    Column("sentiment_score", Float, nullable=True),
    Index("ix_sentiment_trends_created", "created_at"),
)

autonomous_poll_config = Table(
    "autonomous_poll_config",
    metadata,
    Column("config_key", String, primary_key=True),
    Column("config_value", JSON, nullable=False),
    Column("is_enabled", Boolean, nullable=False, default=True),
    Column("updated_by", String, nullable=True),
    Column("updated_at", DateTime(timezone=True), nullable=True),
)

polls = Table(
    "polls",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=True),
    Column("options", JSON, nullable=False),
    Column("poll_style", String, nullable=False, default="card"),
    Column("creator_id", String, nullable=True),
    Column("is_active", Boolean, nullable=False, default=False),
    Column("votes_count", Integer, nullable=False, default=0),
    Column("ends_at", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

autonomous_polls = Table(
    "autonomous_polls",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("poll_id", Uuid, ForeignKey("polls.id"), nullable=False, unique=True),
    Column("trigger_source_id", Uuid, nullable=True),
    Column("trigger_source", String, nullable=False),
    Column("trigger_topic", Text, nullable=False),
    Column("topic_category", String, nullable=False),
    Column("generation_method", String, nullable=False),
    Column("confidence_score", Float, nullable=False),
    Column("auto_published", Boolean, nullable=False),
    Column("admin_approved", Boolean, nullable=True),
    Column("generation_prompt", Text, nullable=False),
    Column("ai_reasoning", Text, nullable=False, default=""),
    Column("metadata_json", JSON, nullable=False, default=dict),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_autonomous_polls_created", "created_at"),
)

autonomous_poll_reviews = Table(
    "autonomous_poll_reviews",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("audit_id", Uuid, ForeignKey("autonomous_polls.id"), nullable=False, unique=True),
    Column("poll_id", Uuid, ForeignKey("polls.id"), nullable=False),
    Column("approved", Boolean, nullable=False),
    Column("reviewer", String, nullable=False),
    Column("reason", Text, nullable=False, default=""),
    Column("reviewed_at", DateTime(timezone=True), nullable=False),
)
