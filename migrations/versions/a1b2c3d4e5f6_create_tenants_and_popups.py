"""Create tenants and popups tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1b2c3d4e5f6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create tenants and popups tables."""
    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_name', sa.String(255), nullable=False),
        sa.Column('shop_slug', sa.String(100), nullable=False),
        sa.Column('shopify_domain', sa.String(255), nullable=True),
        sa.Column('shopify_access_token', sa.Text(), nullable=True),
        sa.Column('webhook_secret', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, default=True),
        sa.Column('uninstalled_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shop_slug'),
    )
    op.create_index('ix_tenants_shopify_domain', 'tenants', ['shopify_domain'], unique=True)

    op.create_table(
        'popups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop', sa.String(255), nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=False),
        sa.Column('is_multi_step', sa.Boolean(), nullable=False, default=False),

        # Nested structures as JSON text
        sa.Column('sections', sa.Text(), nullable=True),
        sa.Column('custom_buttons', sa.Text(), nullable=True),

        # Legacy single-step content
        sa.Column('heading', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('email_placeholder', sa.String(255), nullable=True),
        sa.Column('enable_phone_field', sa.Boolean(), nullable=True),
        sa.Column('phone_required', sa.Boolean(), nullable=True),
        sa.Column('phone_placeholder', sa.String(255), nullable=True),
        sa.Column('footer_text', sa.Text(), nullable=True),

        # Global design
        sa.Column('logo_url', sa.Text(), nullable=True),
        sa.Column('logo_width', sa.Integer(), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('image_position', sa.String(20), nullable=True),
        sa.Column('display_size', sa.String(20), nullable=True),
        sa.Column('corner_radius', sa.String(20), nullable=True),
        sa.Column('alignment', sa.String(20), nullable=True),
        sa.Column('hide_on_mobile', sa.Boolean(), nullable=True),
        sa.Column('background_on_mobile', sa.Boolean(), nullable=True),
        sa.Column('popup_background', sa.String(20), nullable=True),
        sa.Column('text_heading', sa.String(20), nullable=True),
        sa.Column('text_description', sa.String(20), nullable=True),
        sa.Column('text_input', sa.String(20), nullable=True),
        sa.Column('text_consent', sa.String(20), nullable=True),
        sa.Column('text_error', sa.String(20), nullable=True),
        sa.Column('text_label', sa.String(20), nullable=True),
        sa.Column('text_footer', sa.String(20), nullable=True),
        sa.Column('primary_btn_bg', sa.String(20), nullable=True),
        sa.Column('primary_btn_text', sa.String(20), nullable=True),
        sa.Column('secondary_btn_text', sa.String(20), nullable=True),
        sa.Column('custom_btn_bg', sa.String(20), nullable=True),
        sa.Column('custom_btn_text', sa.String(20), nullable=True),

        # Discount
        sa.Column('discount_type', sa.String(50), nullable=True),
        sa.Column('discount_value', sa.Float(), nullable=True),
        sa.Column('discount_code', sa.String(100), nullable=True),

        # Counters
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('subscribers', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('conversion_rate', sa.Float(), nullable=False, server_default='0'),

        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # Every query filters by shop
    op.create_index('ix_popups_shop', 'popups', ['shop'])
    op.create_index('ix_popups_shop_updated_at', 'popups', ['shop', 'updated_at'])


def downgrade():
    """Remove popups and tenants tables."""
    op.drop_index('ix_popups_shop_updated_at', 'popups')
    op.drop_index('ix_popups_shop', 'popups')
    op.drop_table('popups')
    op.drop_index('ix_tenants_shopify_domain', 'tenants')
    op.drop_table('tenants')
