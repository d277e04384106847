"""Initial blood bank schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None

ENUMS = {
    'userrole': ('donor', 'hospital', 'doctor', 'bloodbank_staff', 'supervisor', 'admin'),
    'bloodgroup': ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-'),
    'componenttype': ('Whole Blood', 'Red Blood Cells', 'Plasma', 'Platelets', 'Cryoprecipitate'),
    'eligibilitystatus': ('Unknown', 'Eligible', 'Deferred', 'Needs Review'),
    'unitstatus': ('Available', 'Reserved', 'Used', 'Discarded', 'Expired'),
    'requeststatus': ('Pending', 'Approved', 'Rejected', 'Fulfilled', 'Cancelled'),
    'requesturgency': ('Routine', 'Urgent', 'Emergency'),
    'appointmentstatus': ('Scheduled', 'Completed', 'Cancelled', 'No-Show'),
}


def _enum(name):
    # Types are created up front, several tables share them
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    for name, values in ENUMS.items():
        labels = ", ".join(f"'{value}'" for value in values)
        op.execute(f"""
            DO $$ BEGIN
                CREATE TYPE {name} AS ENUM ({labels});
            EXCEPTION
                WHEN duplicate_object THEN null;
            END $$;
        """)

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', _enum('userrole'), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('contact_number', sa.String(), nullable=True),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('blood_type', _enum('bloodgroup'), nullable=True),
        sa.Column('last_donation_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('eligibility_status', _enum('eligibilitystatus'), nullable=False, server_default='Unknown'),
        sa.Column('medical_history', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'blood_banks',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('contact_email', sa.String(), nullable=False),
        sa.Column('contact_phone', sa.String(), nullable=False),
        sa.Column('street', sa.String(), nullable=False),
        sa.Column('city', sa.String(), nullable=False),
        sa.Column('state', sa.String(), nullable=False),
        sa.Column('zip_code', sa.String(), nullable=False),
        sa.Column('country', sa.String(), nullable=False),
        sa.Column('location_type', sa.String(), nullable=False, server_default='Point'),
        sa.Column('longitude', sa.Float(), nullable=False, server_default='0'),
        sa.Column('latitude', sa.Float(), nullable=False, server_default='0'),
        sa.Column('charges', sa.JSON(), nullable=False),
        sa.Column('managed_by_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_blood_banks_name', 'blood_banks', ['name'], unique=True)
    op.create_index('ix_blood_banks_contact_email', 'blood_banks', ['contact_email'], unique=True)

    op.create_table(
        'blood_requests',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('request_id', sa.String(), nullable=False),
        sa.Column('hospital_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('doctor_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('blood_group', _enum('bloodgroup'), nullable=False),
        sa.Column('component_type', _enum('componenttype'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('urgency', _enum('requesturgency'), nullable=False, server_default='Routine'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', _enum('requeststatus'), nullable=False, server_default='Pending'),
        sa.Column('request_date', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('fulfillment_date', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='ck_blood_requests_quantity_positive'),
    )
    op.create_index('ix_blood_requests_request_id', 'blood_requests', ['request_id'], unique=True)
    op.create_index('ix_blood_requests_hospital_id', 'blood_requests', ['hospital_id'])
    op.create_index('ix_blood_requests_doctor_id', 'blood_requests', ['doctor_id'])
    op.create_index('ix_blood_requests_status', 'blood_requests', ['status'])

    op.create_table(
        'blood_units',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('unit_id', sa.String(), nullable=False),
        sa.Column('blood_group', _enum('bloodgroup'), nullable=False),
        sa.Column('component_type', _enum('componenttype'), nullable=False),
        sa.Column('collection_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expiry_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', _enum('unitstatus'), nullable=False, server_default='Available'),
        sa.Column('blood_bank_id', sa.Uuid(), sa.ForeignKey('blood_banks.id'), nullable=False),
        sa.Column('donor_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('recipient_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('request_id', sa.Uuid(), sa.ForeignKey('blood_requests.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_blood_units_unit_id', 'blood_units', ['unit_id'], unique=True)
    op.create_index('ix_blood_units_blood_group', 'blood_units', ['blood_group'])
    op.create_index('ix_blood_units_status', 'blood_units', ['status'])
    op.create_index('ix_blood_units_blood_bank_id', 'blood_units', ['blood_bank_id'])

    op.create_table(
        'blood_request_units',
        sa.Column('blood_request_id', sa.Uuid(), sa.ForeignKey('blood_requests.id'), primary_key=True),
        sa.Column('blood_unit_id', sa.Uuid(), sa.ForeignKey('blood_units.id'), primary_key=True),
    )

    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('donor_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('blood_bank_id', sa.Uuid(), sa.ForeignKey('blood_banks.id'), nullable=False),
        sa.Column('appointment_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('blood_group', _enum('bloodgroup'), nullable=True),
        sa.Column('status', _enum('appointmentstatus'), nullable=False, server_default='Scheduled'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_appointments_donor_id', 'appointments', ['donor_id'])
    op.create_index('ix_appointments_blood_bank_id', 'appointments', ['blood_bank_id'])


def downgrade() -> None:
    op.drop_table('appointments')
    op.drop_table('blood_request_units')
    op.drop_table('blood_units')
    op.drop_table('blood_requests')
    op.drop_table('blood_banks')
    op.drop_table('users')

    for name in ENUMS:
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
