"""Initial licensing ledger schema

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


MONEY = sa.DECIMAL(precision=12, scale=2)
PERCENT = sa.DECIMAL(precision=5, scale=2)


def upgrade() -> None:
    # Organization and team licenses
    op.create_table(
        'organization_licenses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('admin_email', sa.String(length=255), nullable=False),
        sa.Column('total_seats', sa.Integer(), nullable=False),
        sa.Column('number_of_teams', sa.Integer(), nullable=False),
        sa.Column('stripe_subscription_id', sa.String(length=255), nullable=True),
        sa.Column('source_session_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_organization_licenses')
    )
    op.create_index(
        'ix_organization_licenses_stripe_subscription_id',
        'organization_licenses', ['stripe_subscription_id'], unique=False
    )
    op.create_index(
        'ix_organization_licenses_source_session_id',
        'organization_licenses', ['source_session_id'], unique=False
    )

    op.create_table(
        'license_grants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('organization_license_id', sa.Integer(), nullable=True),
        sa.Column('team_name', sa.String(length=255), nullable=False),
        sa.Column('team_index', sa.Integer(), nullable=False),
        sa.Column('admin_email', sa.String(length=255), nullable=False),
        sa.Column('seat_total', sa.Integer(), nullable=False),
        sa.Column('purchased_seats', sa.Integer(), nullable=False),
        sa.Column('discount_percentage', PERCENT, nullable=False),
        sa.Column('price_per_seat', MONEY, nullable=False),
        sa.Column(
            'subscription_status', sa.String(length=16),
            nullable=False, server_default='active'
        ),
        sa.Column('stripe_subscription_id', sa.String(length=255), nullable=True),
        sa.Column('stripe_customer_id', sa.String(length=255), nullable=True),
        sa.Column('source_session_id', sa.String(length=255), nullable=True),
        sa.Column('extra', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'seat_total >= 1', name='ck_license_grants_seat_total_positive'
        ),
        sa.ForeignKeyConstraint(
            ['organization_license_id'], ['organization_licenses.id'],
            name='fk_license_grants_organization_license_id_organization_licenses',
            ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_license_grants')
    )
    op.create_index(
        'ix_license_grants_organization_license_id', 'license_grants',
        ['organization_license_id'], unique=False
    )
    op.create_index(
        'idx_license_grants_subscription', 'license_grants',
        ['stripe_subscription_id'], unique=False
    )
    op.create_index(
        'idx_license_grants_session', 'license_grants',
        ['source_session_id'], unique=False
    )

    # Redemption codes (coach/member pairs)
    op.create_table(
        'redemption_codes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False),
        sa.Column('license_grant_id', sa.Integer(), nullable=True),
        sa.Column('max_uses', sa.Integer(), nullable=False),
        sa.Column(
            'uses_count', sa.Integer(), nullable=False, server_default='0'
        ),
        sa.Column('linked_code_id', sa.Integer(), nullable=True),
        sa.Column(
            'is_active', sa.Boolean(), nullable=False,
            server_default=sa.text('true')
        ),
        sa.Column(
            'allow_parent_linking', sa.Boolean(), nullable=False,
            server_default=sa.text('false')
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deactivated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            'max_uses >= 1', name='ck_redemption_codes_max_uses_positive'
        ),
        sa.CheckConstraint(
            'uses_count >= 0 AND uses_count <= max_uses',
            name='ck_redemption_codes_uses_within_capacity'
        ),
        sa.ForeignKeyConstraint(
            ['license_grant_id'], ['license_grants.id'],
            name='fk_redemption_codes_license_grant_id_license_grants',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['linked_code_id'], ['redemption_codes.id'],
            name='fk_redemption_codes_linked_code_id_redemption_codes',
            ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_redemption_codes')
    )
    op.create_index(
        'ix_redemption_codes_code', 'redemption_codes', ['code'], unique=True
    )
    op.create_index(
        'idx_redemption_codes_grant_kind', 'redemption_codes',
        ['license_grant_id', 'kind'], unique=False
    )

    # Finder partners and fees
    op.create_table(
        'finder_partners',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('finder_code', sa.String(length=64), nullable=False),
        sa.Column('partner_email', sa.String(length=255), nullable=False),
        sa.Column('partner_name', sa.String(length=255), nullable=False),
        sa.Column(
            'is_recurring', sa.Boolean(), nullable=False,
            server_default=sa.text('false')
        ),
        sa.Column(
            'enabled', sa.Boolean(), nullable=False,
            server_default=sa.text('true')
        ),
        sa.Column(
            'fee_percentage_first', PERCENT, nullable=False,
            server_default='10.00'
        ),
        sa.Column(
            'fee_percentage_renewal', PERCENT, nullable=False,
            server_default='0'
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('disabled_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_finder_partners')
    )
    op.create_index(
        'ix_finder_partners_finder_code', 'finder_partners',
        ['finder_code'], unique=True
    )

    op.create_table(
        'finder_fee_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('finder_code', sa.String(length=64), nullable=False),
        sa.Column('partner_id', sa.Integer(), nullable=True),
        sa.Column(
            'referred_party', sa.String(length=255), nullable=False,
            comment='Referred organization email'
        ),
        sa.Column('purchase_amount', MONEY, nullable=False),
        sa.Column('fee_percentage', PERCENT, nullable=False),
        sa.Column('fee_amount', MONEY, nullable=False),
        sa.Column('is_first_purchase', sa.Boolean(), nullable=False),
        sa.Column('is_recurring_partner', sa.Boolean(), nullable=False),
        sa.Column(
            'status', sa.String(length=16), nullable=False,
            server_default='pending'
        ),
        sa.Column(
            'purchase_session_id', sa.String(length=255), nullable=True,
            comment='Checkout session or invoice id that produced the fee'
        ),
        sa.Column('stripe_subscription_id', sa.String(length=255), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            'purchase_amount > 0',
            name='ck_finder_fee_records_purchase_amount_positive'
        ),
        sa.ForeignKeyConstraint(
            ['partner_id'], ['finder_partners.id'],
            name='fk_finder_fee_records_partner_id_finder_partners',
            ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_finder_fee_records')
    )
    op.create_index(
        'idx_finder_fees_code_party', 'finder_fee_records',
        ['finder_code', 'referred_party'], unique=False
    )
    op.create_index(
        'idx_finder_fees_status', 'finder_fee_records', ['status'], unique=False
    )
    op.create_index(
        'ix_finder_fee_records_purchase_session_id', 'finder_fee_records',
        ['purchase_session_id'], unique=False
    )

    # Promo codes
    op.create_table(
        'promo_codes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'code_type', sa.String(length=16), nullable=False,
            server_default='discount'
        ),
        sa.Column('discount_percent', PERCENT, nullable=True),
        sa.Column('tier_duration_days', sa.Integer(), nullable=True),
        sa.Column('max_redemptions', sa.Integer(), nullable=True),
        sa.Column(
            'redemptions_count', sa.Integer(), nullable=False,
            server_default='0'
        ),
        sa.Column(
            'is_active', sa.Boolean(), nullable=False,
            server_default=sa.text('true')
        ),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'redemptions_count >= 0',
            name='ck_promo_codes_redemptions_non_negative'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_promo_codes')
    )
    op.create_index(
        'ix_promo_codes_code', 'promo_codes', ['code'], unique=True
    )

    op.create_table(
        'promo_redemptions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('promo_code_id', sa.Integer(), nullable=False),
        sa.Column('referred_party', sa.String(length=255), nullable=False),
        sa.Column('discount_applied', PERCENT, nullable=False),
        sa.Column('purchase_session_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['promo_code_id'], ['promo_codes.id'],
            name='fk_promo_redemptions_promo_code_id_promo_codes',
            ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_promo_redemptions')
    )
    op.create_index(
        'ix_promo_redemptions_promo_code_id', 'promo_redemptions',
        ['promo_code_id'], unique=False
    )
    op.create_index(
        'ix_promo_redemptions_referred_party', 'promo_redemptions',
        ['referred_party'], unique=False
    )

    # User profiles and trials
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column(
            'tier', sa.String(length=16), nullable=False, server_default='core'
        ),
        sa.Column(
            'promo_tier_expires_at', sa.DateTime(timezone=True), nullable=True
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_user_profiles')
    )
    op.create_index(
        'ix_user_profiles_email', 'user_profiles', ['email'], unique=True
    )

    op.create_table(
        'trial_grants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_profile_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('granted_by', sa.String(length=32), nullable=False),
        sa.Column('source_record_id', sa.String(length=64), nullable=True),
        sa.Column('granted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            'grace_period_ends_at', sa.DateTime(timezone=True), nullable=False
        ),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['user_profile_id'], ['user_profiles.id'],
            name='fk_trial_grants_user_profile_id_user_profiles',
            ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_trial_grants')
    )
    op.create_index(
        'ix_trial_grants_user_profile_id', 'trial_grants',
        ['user_profile_id'], unique=False
    )
    op.create_index(
        'idx_trial_grants_email_source', 'trial_grants',
        ['user_email', 'granted_by'], unique=False
    )


def downgrade() -> None:
    op.drop_index('idx_trial_grants_email_source', table_name='trial_grants')
    op.drop_index('ix_trial_grants_user_profile_id', table_name='trial_grants')
    op.drop_table('trial_grants')

    op.drop_index('ix_user_profiles_email', table_name='user_profiles')
    op.drop_table('user_profiles')

    op.drop_index(
        'ix_promo_redemptions_referred_party', table_name='promo_redemptions'
    )
    op.drop_index(
        'ix_promo_redemptions_promo_code_id', table_name='promo_redemptions'
    )
    op.drop_table('promo_redemptions')

    op.drop_index('ix_promo_codes_code', table_name='promo_codes')
    op.drop_table('promo_codes')

    op.drop_index(
        'ix_finder_fee_records_purchase_session_id',
        table_name='finder_fee_records'
    )
    op.drop_index('idx_finder_fees_status', table_name='finder_fee_records')
    op.drop_index('idx_finder_fees_code_party', table_name='finder_fee_records')
    op.drop_table('finder_fee_records')

    op.drop_index('ix_finder_partners_finder_code', table_name='finder_partners')
    op.drop_table('finder_partners')

    op.drop_index(
        'idx_redemption_codes_grant_kind', table_name='redemption_codes'
    )
    op.drop_index('ix_redemption_codes_code', table_name='redemption_codes')
    op.drop_table('redemption_codes')

    op.drop_index('idx_license_grants_session', table_name='license_grants')
    op.drop_index('idx_license_grants_subscription', table_name='license_grants')
    op.drop_index(
        'ix_license_grants_organization_license_id', table_name='license_grants'
    )
    op.drop_table('license_grants')

    op.drop_index(
        'ix_organization_licenses_source_session_id',
        table_name='organization_licenses'
    )
    op.drop_index(
        'ix_organization_licenses_stripe_subscription_id',
        table_name='organization_licenses'
    )
    op.drop_table('organization_licenses')
