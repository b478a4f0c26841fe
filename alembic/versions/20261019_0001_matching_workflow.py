"""create users, tutor requests, assignments, applications and demo classes

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = '20261019_0001'
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ('student', 'tutor', 'admin', 'manager')
TUTOR_REQUEST_STATUSES = ('Active', 'Inactive', 'Completed', 'Assign')
ASSIGNMENT_STATUSES = ('pending', 'accepted', 'rejected', 'completed')
APPLICATION_STATUSES = ('pending', 'approved', 'rejected', 'withdrawn')
DEMO_CLASS_STATUSES = ('pending', 'accepted', 'rejected', 'completed', 'cancelled')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('role', sa.Enum(*USER_ROLES, name='user_role_enum'), nullable=False, server_default='student'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'tutor_requests',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('student_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('requested_tutor_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('student_gender', sa.String(10), nullable=False, server_default='both'),
        sa.Column('district', sa.String(100), nullable=False),
        sa.Column('area', sa.String(100), nullable=False),
        sa.Column('detailed_location', sa.Text(), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('selected_categories', sa.JSON(), nullable=False),
        sa.Column('selected_subjects', sa.JSON(), nullable=False),
        sa.Column('selected_classes', sa.JSON(), nullable=False),
        sa.Column('medium', sa.String(100), nullable=True),
        sa.Column('tutor_gender_preference', sa.String(10), nullable=False, server_default='any'),
        sa.Column('number_of_students', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('tutoring_days', sa.Integer(), nullable=True),
        sa.Column('tutoring_time', sa.String(50), nullable=True),
        sa.Column('tutoring_duration', sa.String(50), nullable=True),
        sa.Column('tutoring_type', sa.String(30), nullable=False, server_default='Home Tutoring'),
        sa.Column('extra_information', sa.Text(), nullable=True),
        sa.Column('salary', sa.String(50), nullable=True),
        sa.Column('is_salary_negotiable', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('salary_min', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('salary_max', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('admin_note', sa.Text(), nullable=True),
        sa.Column('update_notice', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum(*TUTOR_REQUEST_STATUSES, name='tutor_request_status_enum'),
            nullable=False,
            server_default='Active',
        ),
        *_timestamps(),
    )
    op.create_index('ix_tutor_requests_student_id', 'tutor_requests', ['student_id'])
    op.create_index('ix_tutor_requests_district', 'tutor_requests', ['district'])
    op.create_index('ix_tutor_requests_status', 'tutor_requests', ['status'])
    op.create_index('ix_tutor_requests_created_at', 'tutor_requests', ['created_at'])

    op.create_table(
        'demo_classes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tutor_request_id', sa.Uuid(), sa.ForeignKey('tutor_requests.id', ondelete='SET NULL'), nullable=True),
        sa.Column('student_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('tutor_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject', sa.String(100), nullable=False),
        sa.Column('requested_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False, server_default='60'),
        sa.Column(
            'status',
            sa.Enum(*DEMO_CLASS_STATUSES, name='demo_class_status_enum'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('student_notes', sa.Text(), nullable=True),
        sa.Column('tutor_notes', sa.Text(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_demo_classes_tutor_request_id', 'demo_classes', ['tutor_request_id'])
    op.create_index('ix_demo_classes_student_id', 'demo_classes', ['student_id'])
    op.create_index('ix_demo_classes_tutor_id', 'demo_classes', ['tutor_id'])
    op.create_index('ix_demo_classes_status', 'demo_classes', ['status'])
    op.create_index('ix_demo_classes_created_at', 'demo_classes', ['created_at'])

    op.create_table(
        'tutor_assignments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tutor_request_id', sa.Uuid(), sa.ForeignKey('tutor_requests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tutor_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assigned_by', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column(
            'status',
            sa.Enum(*ASSIGNMENT_STATUSES, name='tutor_assignment_status_enum'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('demo_class_id', sa.Uuid(), sa.ForeignKey('demo_classes.id', ondelete='SET NULL'), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_tutor_assignments_tutor_request_id', 'tutor_assignments', ['tutor_request_id'])
    op.create_index('ix_tutor_assignments_tutor_id', 'tutor_assignments', ['tutor_id'])
    op.create_index('ix_tutor_assignments_status', 'tutor_assignments', ['status'])

    op.create_table(
        'tutor_applications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tutor_request_id', sa.Uuid(), sa.ForeignKey('tutor_requests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tutor_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('proposed_rate', sa.Integer(), nullable=True),
        sa.Column(
            'status',
            sa.Enum(*APPLICATION_STATUSES, name='tutor_application_status_enum'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tutor_request_id', 'tutor_id', name='uq_application_request_tutor'),
    )
    op.create_index('ix_tutor_applications_tutor_request_id', 'tutor_applications', ['tutor_request_id'])
    op.create_index('ix_tutor_applications_tutor_id', 'tutor_applications', ['tutor_id'])
    op.create_index('ix_tutor_applications_status', 'tutor_applications', ['status'])


def downgrade() -> None:
    op.drop_table('tutor_applications')
    op.drop_table('tutor_assignments')
    op.drop_table('demo_classes')
    op.drop_table('tutor_requests')
    op.drop_table('users')

    bind = op.get_bind()
    for name in (
        'tutor_application_status_enum',
        'tutor_assignment_status_enum',
        'demo_class_status_enum',
        'tutor_request_status_enum',
        'user_role_enum',
    ):
        sa.Enum(name=name).drop(bind, checkfirst=True)
