from mfms.extensions import db

class MerchantDeviceAssociation(db.Model):
    """A device provisioned to a merchant. Written by provisioning, read by feedback."""
    __tablename__ = "merchant_device_associations"

    id = db.Column(db.Integer, primary_key=True)
    merchant_id = db.Column(
        db.Integer,
        db.ForeignKey("merchants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    device_id = db.Column(
        db.Integer,
        db.ForeignKey("devices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    merchant = db.relationship("Merchant", lazy="joined")
    device = db.relationship("Device", lazy="joined")

    __table_args__ = (
        db.Index("ix_mda_merchant_device", "merchant_id", "device_id"),
    )
