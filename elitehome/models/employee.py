# elitehome/models/employee.py
from pydantic import BaseModel
from typing import Literal, Optional

EmployeeStatus = Literal["Active", "Inactive"]

class Employee(BaseModel):
    id: str
    name: str
    role: str = ""
    salary: Optional[float] = None
    contact: str = ""
    doj: str = ""
    photo: Optional[str] = None
    status: EmployeeStatus = "Active"


def serialize_employee(doc: dict) -> dict:
    data = {k: v for k, v in doc.items() if k != "_id"}
    return Employee(id=str(doc["_id"]), **data).model_dump()
