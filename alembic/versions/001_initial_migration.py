"""Initial migration - sellers, verification, admins, products

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

document_type = sa.Enum(
    'PAN', 'AADHAAR', 'VOTER_ID', 'DRIVING_LICENSE', 'RATION_CARD', 'NONE', name='documenttype'
)
seller_category = sa.Enum(
    'AGRICULTURE', 'HANDICRAFTS', 'SERVICES', 'MANUFACTURING', 'TEXTILES', 'FOOD_PROCESSING', 'TECHNOLOGY', 'OTHER',
    name='sellercategory'
)


def upgrade() -> None:
    # Sellers table
    op.create_table(
        'sellers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('phone', sa.String(20), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(100)),
        sa.Column('email', sa.String(255)),
        sa.Column('region', sa.String(50), index=True),
        sa.Column('city', sa.String(50)),
        sa.Column('village', sa.String(50)),
        sa.Column('categories', sa.JSON(), nullable=False),
        sa.Column('language', sa.Enum('ENGLISH', 'HINDI', 'BOTH', name='sellerlanguage'), nullable=False),
        sa.Column('scale', sa.Enum('MICRO', 'SMALL', 'MEDIUM', name='businessscale')),
        sa.Column('capacity', sa.String(200)),
        sa.Column('has_documents', sa.Boolean(), nullable=False, default=False),
        sa.Column('document_type', document_type),
        sa.Column('document_paths', sa.JSON(), nullable=False),
        sa.Column('alternate_documents', sa.JSON(), nullable=False),
        sa.Column(
            'verification_status',
            sa.Enum('VERIFIED', 'PROVISIONAL', 'PENDING', name='verificationstatus'),
            nullable=False,
            index=True,
        ),
        sa.Column('union_membership_id', sa.String(16), unique=True),
        sa.Column('union_issue_date', sa.DateTime(timezone=True)),
        sa.Column('union_expiry_date', sa.DateTime(timezone=True)),
        sa.Column(
            'union_status',
            sa.Enum('ACTIVE', 'EXPIRED', 'SUSPENDED', name='membershipstatus'),
            nullable=False,
        ),
        sa.Column('union_status_reason', sa.String(500)),
        sa.Column('referral_code', sa.String(6), unique=True),
        sa.Column('referred_by_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('sellers.id')),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'seller_support_tickets',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('seller_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('sellers.id'), nullable=False, index=True),
        sa.Column('issue', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.Enum('OPEN', 'IN_PROGRESS', 'RESOLVED', name='ticketstatus'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Admins
    op.create_table(
        'admins',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(50), nullable=False, unique=True, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.Enum('SUPER_ADMIN', 'ADMIN', 'MODERATOR', name='adminrole'), nullable=False, index=True),
        sa.Column('permissions', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True, index=True),
        sa.Column('last_login', sa.DateTime(timezone=True)),
        sa.Column('login_attempts', sa.Integer(), nullable=False, default=0),
        sa.Column('lock_until', sa.DateTime(timezone=True)),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('email', sa.String(255)),
        sa.Column('phone', sa.String(20)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'admin_activity',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('admin_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('admins.id'), nullable=False, index=True),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('target', sa.String(100)),
        sa.Column('ip_address', sa.String(64)),
        sa.Column('user_agent', sa.String(500)),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Verification records and their audit trail
    op.create_table(
        'verifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('seller_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('sellers.id'), nullable=False, unique=True),
        sa.Column('document_type', document_type, nullable=False),
        sa.Column('documents', sa.JSON(), nullable=False),
        sa.Column('alternate_documents', sa.JSON(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'APPROVED', 'REJECTED', 'UNDER_REVIEW', name='verificationrecordstatus'),
            nullable=False,
            index=True,
        ),
        sa.Column('admin_notes', sa.String(1000)),
        sa.Column('rejection_reason', sa.String(500)),
        sa.Column('reviewed_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('admins.id'), index=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True)),
        sa.Column('is_provisional', sa.Boolean(), nullable=False, default=False, index=True),
        sa.Column('provisional_expiry_date', sa.DateTime(timezone=True), index=True),
        sa.Column('renewal_count', sa.Integer(), nullable=False, default=0),
        sa.Column('max_renewals', sa.Integer(), nullable=False, default=2),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'verification_history',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            'verification_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('verifications.id'),
            nullable=False, index=True,
        ),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column(
            'action',
            sa.Enum('SUBMITTED', 'UNDER_REVIEW', 'APPROVED', 'REJECTED', 'RESUBMITTED', name='historyaction'),
            nullable=False,
        ),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('admin_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('admins.id')),
        sa.Column('notes', sa.String(1000)),
    )

    # OTP challenges
    op.create_table(
        'otp_challenges',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('phone', sa.String(20), nullable=False, unique=True, index=True),
        sa.Column('otp_code', sa.String(6), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('attempts', sa.Integer(), nullable=False, default=0),
        sa.Column('max_attempts', sa.Integer(), nullable=False, default=3),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Products
    op.create_table(
        'products',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('seller_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('sellers.id'), nullable=False, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', seller_category, nullable=False, index=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.Enum('INR', 'USD', name='currency'), nullable=False),
        sa.Column('max_units', sa.Integer(), nullable=False),
        sa.Column('available_units', sa.Integer(), nullable=False),
        sa.Column('lead_time', sa.String(100), nullable=False),
        sa.Column(
            'status',
            sa.Enum('ACTIVE', 'INACTIVE', 'OUT_OF_STOCK', 'DISCONTINUED', name='productstatus'),
            nullable=False,
            index=True,
        ),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('specifications', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('products')
    op.drop_table('otp_challenges')
    op.drop_table('verification_history')
    op.drop_table('verifications')
    op.drop_table('admin_activity')
    op.drop_table('admins')
    op.drop_table('seller_support_tickets')
    op.drop_table('sellers')

    bind = op.get_bind()
    for enum_name in (
        'productstatus', 'currency', 'historyaction', 'verificationrecordstatus', 'adminrole', 'ticketstatus',
        'membershipstatus', 'verificationstatus', 'businessscale', 'sellerlanguage', 'sellercategory', 'documenttype',
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
