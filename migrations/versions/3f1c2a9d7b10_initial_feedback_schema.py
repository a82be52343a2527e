"""initial feedback schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f1c2a9d7b10'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('uuid', sa.String(length=36), nullable=False, unique=True),
        sa.Column('payswiff_id', sa.String(length=64), nullable=False, unique=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=32), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('designation', sa.String(length=120), nullable=False),
        sa.Column('employee_type', sa.String(length=20), nullable=False, server_default='employee'),
        *_timestamps(),
        sa.CheckConstraint("employee_type IN ('admin','employee')", name='ck_employees_type_valid'),
    )

    op.create_table(
        'merchants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('uuid', sa.String(length=36), nullable=False, unique=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=32), nullable=False, unique=True),
        sa.Column('business_name', sa.String(length=255), nullable=False),
        sa.Column('business_type', sa.String(length=120), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'devices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('uuid', sa.String(length=36), nullable=False, unique=True),
        sa.Column('model', sa.String(length=120), nullable=False, unique=True),
        sa.Column('manufacturer', sa.String(length=120), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('uuid', sa.String(length=36), nullable=True, unique=True),
        sa.Column('description', sa.String(length=500), nullable=False, unique=True),
    )

    op.create_table(
        'merchant_device_associations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('device_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['device_id'], ['devices.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_merchant_device_associations_merchant_id', 'merchant_device_associations', ['merchant_id'])
    op.create_index('ix_merchant_device_associations_device_id', 'merchant_device_associations', ['device_id'])
    op.create_index('ix_mda_merchant_device', 'merchant_device_associations', ['merchant_id', 'device_id'])

    op.create_table(
        'feedback',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('uuid', sa.String(length=36), nullable=False, unique=True),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('device_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Float(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('image_ref', sa.String(length=1000), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['device_id'], ['devices.id'], ondelete='RESTRICT'),
    )
    op.create_index('ix_feedback_employee_id', 'feedback', ['employee_id'])
    op.create_index('ix_feedback_merchant_id', 'feedback', ['merchant_id'])
    op.create_index('ix_feedback_device_id', 'feedback', ['device_id'])
    op.create_index('ix_feedback_device_rating', 'feedback', ['device_id', 'rating'])

    op.create_table(
        'feedback_question_associations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('feedback_id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('answer', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['feedback_id'], ['feedback.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['questions.id'], ondelete='RESTRICT'),
        sa.UniqueConstraint('feedback_id', 'question_id', name='uq_fqa_feedback_question'),
    )
    op.create_index('ix_feedback_question_associations_feedback_id', 'feedback_question_associations', ['feedback_id'])
    op.create_index('ix_feedback_question_associations_question_id', 'feedback_question_associations', ['question_id'])

    op.create_table(
        'email_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('to_email', sa.String(length=320), nullable=False),
        sa.Column('template', sa.String(length=64), nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_email_logs_to_email', 'email_logs', ['to_email'])
    op.create_index('ix_email_logs_status', 'email_logs', ['status'])


def downgrade():
    op.drop_table('email_logs')
    op.drop_table('feedback_question_associations')
    op.drop_table('feedback')
    op.drop_table('merchant_device_associations')
    op.drop_table('questions')
    op.drop_table('devices')
    op.drop_table('merchants')
    op.drop_table('employees')
