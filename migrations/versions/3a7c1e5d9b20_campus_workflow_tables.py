"""campus workflow tables

Revision ID: 3a7c1e5d9b20
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c1e5d9b20'
down_revision = None
branch_labels = None
depends_on = None

role_enum = sa.Enum('STUDENT', 'TEACHER', 'ADMIN', name='roleenum')


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('signup_metadata', sa.JSON(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'college',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('address', sa.String(length=512), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('website', sa.String(length=512), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )

    op.create_table(
        'department',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('college_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['college_id'], ['college.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('college_id', 'code', name='uq_department_college_code'),
    )

    # room_admin apunta a profile: la FK se agrega después de crear profile.
    op.create_table(
        'department_room',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('room_name', sa.String(length=255), nullable=False),
        sa.Column('room_code', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('max_students', sa.Integer(), nullable=True),
        sa.Column('max_teachers', sa.Integer(), nullable=True),
        sa.Column('room_admin', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['department_id'], ['department.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'profile',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', role_enum, nullable=False),
        sa.Column('detailed_role', sa.String(length=50), nullable=True),
        sa.Column('is_hod', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('employee_id', sa.String(length=100), nullable=True),
        sa.Column('student_id', sa.String(length=100), nullable=True),
        sa.Column('qualification', sa.String(length=255), nullable=True),
        sa.Column('experience', sa.String(length=255), nullable=True),
        sa.Column('hod_details', sa.Text(), nullable=True),
        sa.Column('college_id', sa.Integer(), nullable=True),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('room_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('pending_approval', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['id'], ['user.id']),
        sa.ForeignKeyConstraint(['college_id'], ['college.id']),
        sa.ForeignKeyConstraint(['department_id'], ['department.id']),
        sa.ForeignKeyConstraint(['room_id'], ['department_room.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    with op.batch_alter_table('department_room') as batch_op:
        batch_op.create_foreign_key('fk_department_room_admin', 'profile', ['room_admin'], ['id'])

    op.create_table(
        'department_code',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('college_id', sa.Integer(), nullable=False),
        sa.Column('student_code', sa.String(length=50), nullable=False),
        sa.Column('teacher_code', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['department_id'], ['department.id']),
        sa.ForeignKeyConstraint(['college_id'], ['college.id']),
        sa.ForeignKeyConstraint(['created_by'], ['profile.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_department_code_student_code', 'department_code', ['student_code'], unique=False)
    op.create_index('ix_department_code_teacher_code', 'department_code', ['teacher_code'], unique=False)

    op.create_table(
        'department_admin',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('college_id', sa.Integer(), nullable=False),
        sa.Column('assigned_by', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profile.id']),
        sa.ForeignKeyConstraint(['department_id'], ['department.id']),
        sa.ForeignKeyConstraint(['college_id'], ['college.id']),
        sa.ForeignKeyConstraint(['assigned_by'], ['profile.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'department_id', name='uq_department_admin_user_department'),
    )

    op.create_table(
        'pending_department_join',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('college_id', sa.Integer(), nullable=False),
        sa.Column('join_code', sa.String(length=50), nullable=False),
        sa.Column('user_role', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profile.id']),
        sa.ForeignKeyConstraint(['department_id'], ['department.id']),
        sa.ForeignKeyConstraint(['college_id'], ['college.id']),
        sa.ForeignKeyConstraint(['reviewed_by'], ['profile.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'college_admin_request',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('college_name', sa.String(length=255), nullable=False),
        sa.Column('college_code', sa.String(length=50), nullable=False),
        sa.Column('college_address', sa.String(length=512), nullable=True),
        sa.Column('admin_name', sa.String(length=255), nullable=False),
        sa.Column('admin_email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('website', sa.String(length=512), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profile.id']),
        sa.ForeignKeyConstraint(['approved_by'], ['profile.id']),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('college_admin_request')
    op.drop_table('pending_department_join')
    op.drop_table('department_admin')
    op.drop_index('ix_department_code_teacher_code', table_name='department_code')
    op.drop_index('ix_department_code_student_code', table_name='department_code')
    op.drop_table('department_code')
    with op.batch_alter_table('department_room') as batch_op:
        batch_op.drop_constraint('fk_department_room_admin', type_='foreignkey')
    op.drop_table('profile')
    op.drop_table('department_room')
    op.drop_table('department')
    op.drop_table('college')
    op.drop_table('user')
    role_enum.drop(op.get_bind(), checkfirst=True)
