from werkzeug.security import generate_password_hash, check_password_hash
from sqlalchemy import func, CheckConstraint
from mfms.extensions import db

# Keep simple text+CHECK for the type tag (no DB enum migration pain)
EMPLOYEE_TYPE_ADMIN = "admin"
EMPLOYEE_TYPE_EMPLOYEE = "employee"
EMPLOYEE_TYPES = (EMPLOYEE_TYPE_ADMIN, EMPLOYEE_TYPE_EMPLOYEE)

ROLE_ADMIN = "ROLE_ADMIN"
ROLE_EMPLOYEE = "ROLE_EMPLOYEE"

_ROLES_BY_TYPE = {
    EMPLOYEE_TYPE_ADMIN: (ROLE_ADMIN, ROLE_EMPLOYEE),
    EMPLOYEE_TYPE_EMPLOYEE: (ROLE_EMPLOYEE,),
}

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True)
    payswiff_id = db.Column(db.String(64), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    phone = db.Column(db.String(32), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    designation = db.Column(db.String(120), nullable=False)
    employee_type = db.Column(db.String(20), nullable=False, server_default=EMPLOYEE_TYPE_EMPLOYEE)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "employee_type IN ('admin','employee')",
            name="ck_employees_type_valid",
        ),
    )

    # helpers
    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def roles(self) -> tuple:
        return _ROLES_BY_TYPE.get(self.employee_type, ())

    def to_dict(self) -> dict:
        # password_hash is deliberately absent
        return {
            "id": self.id,
            "uuid": self.uuid,
            "payswiff_id": self.payswiff_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "designation": self.designation,
            "employee_type": self.employee_type,
        }

    def __repr__(self) -> str:
        return f"<Employee id={self.id} email={self.email} type={self.employee_type}>"
