"""Create pumpfun_tokens and launchlab_tokens.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


def _shared_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token_mint", sa.String(64), nullable=False, unique=True),
        sa.Column("token_name", sa.String(32), nullable=False),
        sa.Column("token_symbol", sa.String(8), nullable=False),
        sa.Column("creator_address", sa.String(64), nullable=False),
        sa.Column("metadata_uri", sa.String(200), nullable=False),
        sa.Column("image_uri", sa.String(500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("social_media", sa.JSON(), nullable=True),
        sa.Column("initial_market_cap", sa.BigInteger(), nullable=True),
        sa.Column("current_market_cap", sa.BigInteger(), nullable=True),
        sa.Column("initial_supply", sa.BigInteger(), nullable=False),
        sa.Column("current_supply", sa.BigInteger(), nullable=False),
        sa.Column("decimals", sa.Integer(), nullable=False, server_default="6"),
        sa.Column("signature", sa.String(128), nullable=False, server_default=""),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("initial_buy_amount", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "pumpfun_tokens",
        *_shared_columns(),
        sa.Column("bonding_curve_address", sa.String(64), nullable=False),
        sa.Column("associated_bonding_curve_address", sa.String(64), nullable=False),
        sa.Column("mayhem_mode", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("idx_pumpfun_tokens_creator", "pumpfun_tokens", ["creator_address"])

    op.create_table(
        "launchlab_tokens",
        *_shared_columns(),
        sa.Column("platform_id", sa.String(64), nullable=False),
        sa.Column("config_id", sa.String(64), nullable=False),
        sa.Column("pool_id", sa.String(64), nullable=False),
        sa.Column("vault_a", sa.String(64), nullable=False),
        sa.Column("vault_b", sa.String(64), nullable=False),
    )
    op.create_index("idx_launchlab_tokens_creator", "launchlab_tokens", ["creator_address"])


def downgrade() -> None:
    op.drop_index("idx_launchlab_tokens_creator", table_name="launchlab_tokens")
    op.drop_table("launchlab_tokens")
    op.drop_index("idx_pumpfun_tokens_creator", table_name="pumpfun_tokens")
    op.drop_table("pumpfun_tokens")
