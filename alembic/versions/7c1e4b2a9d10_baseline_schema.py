"""baseline_schema

Revision ID: 7c1e4b2a9d10
Revises:
Create Date: 2026-10-17 09:12:41.118204

Creates every CrossCareers table. Tables that already exist are left untouched.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '7c1e4b2a9d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('first_name', sa.String(), nullable=False),
            sa.Column('last_name', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('password_hash', sa.String(), nullable=False),
            sa.Column('role', sa.String(), nullable=False),
            sa.Column('is_deleted', sa.Boolean(), nullable=False),
            sa.Column('mobile_number', sa.String(), nullable=True),
            sa.Column('address', sa.String(), nullable=True),
            sa.Column('photo', sa.String(), nullable=True),
            sa.Column('is_verified', sa.Boolean(), nullable=False),
            sa.Column('email_otp_hash', sa.String(), nullable=True),
            sa.Column('email_otp_expires_at', sa.DateTime(), nullable=True),
            sa.Column('email_otp_attempts', sa.Integer(), nullable=False),
            sa.Column('email_otp_last_sent_at', sa.DateTime(), nullable=True),
            sa.Column('password_reset_token', sa.String(), nullable=True),
            sa.Column('password_reset_expires', sa.DateTime(), nullable=True),
            sa.Column('refresh_tokens', sa.JSON(), nullable=False),
            sa.Column('referral_code', sa.String(length=5), nullable=False),
            sa.Column('referred_by', sa.Integer(), nullable=True),
            sa.Column('referral_enabled', sa.Boolean(), nullable=False),
            sa.Column('points', sa.Integer(), nullable=False),
            sa.Column('subscription_type', sa.String(), nullable=False),
            sa.Column('subscription_plan', sa.String(), nullable=True),
            sa.Column('subscription_status', sa.String(), nullable=False),
            sa.Column('subscription_expires_at', sa.DateTime(), nullable=True),
            sa.Column('free_trial_expires_at', sa.DateTime(), nullable=True),
            sa.Column('payment_id', sa.String(), nullable=True),
            sa.Column('transaction_id', sa.String(), nullable=True),
            sa.Column('payment_provider', sa.String(), nullable=True),
            sa.Column('payment_number', sa.String(), nullable=True),
            sa.Column('amount', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['referred_by'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
        op.create_index(op.f('ix_users_referral_code'), 'users', ['referral_code'], unique=True)
        op.create_index(op.f('ix_users_referred_by'), 'users', ['referred_by'], unique=False)
        op.create_index(op.f('ix_users_password_reset_token'), 'users', ['password_reset_token'], unique=False)

    if not table_exists('resumes'):
        op.create_table('resumes',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('personal_info', sa.JSON(), nullable=False),
            sa.Column('career_objective', sa.Text(), nullable=True),
            sa.Column('career_summary', sa.Text(), nullable=True),
            sa.Column('work_experience', sa.JSON(), nullable=False),
            sa.Column('education', sa.JSON(), nullable=False),
            sa.Column('trainings', sa.JSON(), nullable=False),
            sa.Column('certifications', sa.JSON(), nullable=False),
            sa.Column('skills', sa.JSON(), nullable=False),
            sa.Column('references', sa.JSON(), nullable=False),
            sa.Column('is_deleted', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_resumes_id'), 'resumes', ['id'], unique=False)
        op.create_index(op.f('ix_resumes_user_id'), 'resumes', ['user_id'], unique=False)
        op.create_index('idx_resume_user_deleted', 'resumes', ['user_id', 'is_deleted'], unique=False)

    if not table_exists('test_sessions'):
        op.create_table('test_sessions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('job_title', sa.String(length=120), nullable=False),
            sa.Column('experience_years', sa.Integer(), nullable=False),
            sa.Column('skills', sa.JSON(), nullable=False),
            sa.Column('job_description', sa.Text(), nullable=True),
            sa.Column('duration_minutes', sa.Integer(), nullable=False),
            sa.Column('questions', sa.JSON(), nullable=False),
            sa.Column('current_index', sa.Integer(), nullable=False),
            sa.Column('total_score', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('started_at', sa.DateTime(), nullable=True),
            sa.Column('expires_at', sa.DateTime(), nullable=True),
            sa.Column('completed_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_test_sessions_id'), 'test_sessions', ['id'], unique=False)
        op.create_index(op.f('ix_test_sessions_user_id'), 'test_sessions', ['user_id'], unique=False)
        op.create_index(op.f('ix_test_sessions_status'), 'test_sessions', ['status'], unique=False)
        op.create_index('idx_test_session_user_created', 'test_sessions', ['user_id', 'created_at'], unique=False)

    if not table_exists('transactions'):
        op.create_table('transactions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('payment_id', sa.String(), nullable=False),
            sa.Column('trx_id', sa.String(), nullable=True),
            sa.Column('invoice_number', sa.String(), nullable=False),
            sa.Column('plan', sa.String(), nullable=False),
            sa.Column('amount', sa.Integer(), nullable=False),
            sa.Column('currency', sa.String(), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('executed_at', sa.DateTime(), nullable=True),
            sa.Column('raw_response', sa.JSON(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_transactions_id'), 'transactions', ['id'], unique=False)
        op.create_index(op.f('ix_transactions_user_id'), 'transactions', ['user_id'], unique=False)
        op.create_index(op.f('ix_transactions_payment_id'), 'transactions', ['payment_id'], unique=True)
        op.create_index(op.f('ix_transactions_status'), 'transactions', ['status'], unique=False)

    if not table_exists('withdrawals'):
        op.create_table('withdrawals',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('points', sa.Integer(), nullable=False),
            sa.Column('payment_provider', sa.String(), nullable=False),
            sa.Column('payment_number', sa.String(), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('requested_at', sa.DateTime(), nullable=False),
            sa.Column('processed_at', sa.DateTime(), nullable=True),
            sa.Column('processed_by', sa.Integer(), nullable=True),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.ForeignKeyConstraint(['processed_by'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_withdrawals_id'), 'withdrawals', ['id'], unique=False)
        op.create_index(op.f('ix_withdrawals_user_id'), 'withdrawals', ['user_id'], unique=False)
        op.create_index(op.f('ix_withdrawals_status'), 'withdrawals', ['status'], unique=False)
        op.create_index(op.f('ix_withdrawals_requested_at'), 'withdrawals', ['requested_at'], unique=False)

    if not table_exists('presentations'):
        op.create_table('presentations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(), nullable=False),
            sa.Column('topic', sa.String(), nullable=True),
            sa.Column('content_preview', sa.Text(), nullable=True),
            sa.Column('source_type', sa.String(), nullable=False),
            sa.Column('file_name', sa.String(), nullable=True),
            sa.Column('slide_count', sa.Integer(), nullable=False),
            sa.Column('design', sa.String(), nullable=False),
            sa.Column('animation', sa.Boolean(), nullable=False),
            sa.Column('include_graphics', sa.Boolean(), nullable=False),
            sa.Column('slides', sa.JSON(), nullable=False),
            sa.Column('pptx_data', sa.LargeBinary(), nullable=False),
            sa.Column('pdf_data', sa.LargeBinary(), nullable=False),
            sa.Column('pptx_size', sa.Integer(), nullable=False),
            sa.Column('pdf_size', sa.Integer(), nullable=False),
            sa.Column('processing_time_ms', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_presentations_id'), 'presentations', ['id'], unique=False)
        op.create_index(op.f('ix_presentations_user_id'), 'presentations', ['user_id'], unique=False)
        op.create_index('idx_presentation_user_created', 'presentations', ['user_id', 'created_at'], unique=False)

    if not table_exists('generated_contents'):
        op.create_table('generated_contents',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('document_type', sa.String(), nullable=False),
            sa.Column('style', sa.String(), nullable=True),
            sa.Column('title', sa.String(), nullable=False),
            sa.Column('source_preview', sa.Text(), nullable=True),
            sa.Column('content', sa.JSON(), nullable=False),
            sa.Column('word_count', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_generated_contents_id'), 'generated_contents', ['id'], unique=False)
        op.create_index(op.f('ix_generated_contents_user_id'), 'generated_contents', ['user_id'], unique=False)
        op.create_index(op.f('ix_generated_contents_created_at'), 'generated_contents', ['created_at'], unique=False)

    if not table_exists('interview_sessions'):
        op.create_table('interview_sessions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('practice_mode', sa.String(), nullable=False),
            sa.Column('job_description', sa.Text(), nullable=True),
            sa.Column('questions', sa.JSON(), nullable=False),
            sa.Column('answers', sa.JSON(), nullable=False),
            sa.Column('analysis', sa.JSON(), nullable=True),
            sa.Column('overall_score', sa.Integer(), nullable=True),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('completed_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_interview_sessions_id'), 'interview_sessions', ['id'], unique=False)
        op.create_index(op.f('ix_interview_sessions_user_id'), 'interview_sessions', ['user_id'], unique=False)
        op.create_index(op.f('ix_interview_sessions_created_at'), 'interview_sessions', ['created_at'], unique=False)

    if not table_exists('spreadsheet_generations'):
        op.create_table('spreadsheet_generations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('input_preview', sa.Text(), nullable=True),
            sa.Column('format_instructions', sa.Text(), nullable=False),
            sa.Column('file_name', sa.String(), nullable=True),
            sa.Column('file_type', sa.String(), nullable=True),
            sa.Column('file_size', sa.Integer(), nullable=True),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('workbook', sa.JSON(), nullable=True),
            sa.Column('xlsx_data', sa.LargeBinary(), nullable=True),
            sa.Column('xlsx_size', sa.Integer(), nullable=False),
            sa.Column('error', sa.Text(), nullable=True),
            sa.Column('processing_time_ms', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_spreadsheet_generations_id'), 'spreadsheet_generations', ['id'], unique=False)
        op.create_index(op.f('ix_spreadsheet_generations_user_id'), 'spreadsheet_generations', ['user_id'], unique=False)
        op.create_index(op.f('ix_spreadsheet_generations_status'), 'spreadsheet_generations', ['status'], unique=False)
        op.create_index('idx_spreadsheet_user_created', 'spreadsheet_generations', ['user_id', 'created_at'], unique=False)


def downgrade() -> None:
    for table_name in (
        'spreadsheet_generations',
        'interview_sessions',
        'generated_contents',
        'presentations',
        'withdrawals',
        'transactions',
        'test_sessions',
        'resumes',
        'users',
    ):
        if table_exists(table_name):
            op.drop_table(table_name)
