"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import Boolean, Column, DateTime, Index, MetaData, String, Table, text

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# LINKS TABLE
# ============================================================================
links_table = Table(
    "links",
    metadata,
    Column("github_id", String(64), primary_key=True),  # One link per GitHub account
    Column("github_login", String(100), nullable=False),
    Column("github_avatar", String, nullable=True),
    Column("github_token", String, nullable=True),
    Column("aad_id", String(64), nullable=False),  # Directory object id
    Column("aad_upn", String(255), nullable=True),
    Column("aad_name", String(255), nullable=True),
    Column("is_service_account", Boolean, nullable=False, server_default=text("false")),
    Column("service_account_mail", String(255), nullable=True),
    Column("hub_import", Boolean, nullable=False, server_default=text("false")),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
)

Index("ix_links_aad_id", links_table.c.aad_id)
