from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'shipments',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('tracking_number', sa.String(40), nullable=False),
        sa.Column('status', sa.String(40), nullable=False, server_default='processing'),
        sa.Column('origin_location', sa.String(255), nullable=False),
        sa.Column('destination_location', sa.String(255), nullable=False),
        sa.Column('current_location', sa.String(255), nullable=True),
        sa.Column('estimated_delivery', sa.Date, nullable=True),
        sa.Column('sender_name', sa.String(200), nullable=True),
        sa.Column('sender_email', sa.String(255), nullable=True),
        sa.Column('sender_address', sa.String(500), nullable=True),
        sa.Column('sender_country', sa.String(100), nullable=True),
        sa.Column('recipient_name', sa.String(200), nullable=True),
        sa.Column('recipient_email', sa.String(255), nullable=True),
        sa.Column('recipient_address', sa.String(500), nullable=True),
        sa.Column('recipient_country', sa.String(100), nullable=True),
        sa.Column('package_description', sa.Text, nullable=True),
        sa.Column('weight_kg', sa.Numeric(10, 2), nullable=True),
        sa.Column('package_value', sa.Numeric(12, 2), nullable=True),
        sa.Column('service_type', sa.String(30), nullable=False, server_default='standard'),
        sa.Column('delivery_days', sa.Integer, nullable=True),
        sa.Column('shipping_fee', sa.Numeric(12, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_shipments_tracking_number', 'shipments', ['tracking_number'], unique=True)

    op.create_table(
        'shipment_events',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('shipment_id', sa.Integer, sa.ForeignKey('shipments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('event_date', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('completed', sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_shipment_events_shipment_id', 'shipment_events', ['shipment_id'])

def downgrade():
    op.drop_index('ix_shipment_events_shipment_id', table_name='shipment_events')
    op.drop_table('shipment_events')
    op.drop_index('ix_shipments_tracking_number', table_name='shipments')
    op.drop_table('shipments')
