# elitehome/routers/employees.py

import re
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from elitehome.core.logger import logger
from elitehome.db.mongo import EMPLOYEES, get_db
from elitehome.models.employee import EmployeeStatus, serialize_employee
from elitehome.models.user import Principal
from elitehome.routers.deps import require_admin
from elitehome.utils.errors import BadRequestError, NotFoundError
from elitehome.utils.object_ids import parse_object_id
from elitehome.utils.pagination import build_pagination, build_sort
from elitehome.utils.responses import format_response
from elitehome.utils.uploads import is_image, remove_upload, save_upload

router = APIRouter(tags=["employees"])


async def _store_photo(photo: Optional[UploadFile]) -> Optional[str]:
    if photo is None or not photo.filename:
        return None
    if not is_image(photo):
        raise BadRequestError("Photo must be an image file")
    return await save_upload(photo)


async def _get_or_404(db: AsyncIOMotorDatabase, employee_id: str) -> dict:
    doc = await db[EMPLOYEES].find_one({"_id": parse_object_id(employee_id)})
    if not doc:
        raise NotFoundError("Employee not found")
    return doc


@router.post("", status_code=201, summary="Add an employee")
async def add_employee(
    name: str = Form(...),
    role: str = Form(""),
    salary: Optional[float] = Form(None),
    contact: str = Form(""),
    doj: str = Form(""),
    photo: Optional[UploadFile] = File(None),
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = {
        "name": name,
        "role": role,
        "salary": salary,
        "contact": contact,
        "doj": doj,
        "photo": await _store_photo(photo),
        "status": "Active",
    }
    result = await db[EMPLOYEES].insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("Employee added: %s", name)
    return format_response(success=True, data={"employee": serialize_employee(doc)})


@router.get("", summary="List employees, optionally filtered by name or role")
async def list_employees(
    search: str = "",
    page: int = 1,
    page_size: int = 50,
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    query = {}
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"role": {"$regex": pattern, "$options": "i"}},
        ]
    skip, limit = build_pagination(page, page_size)
    total = await db[EMPLOYEES].count_documents(query)
    cursor = db[EMPLOYEES].find(query).sort(build_sort("name", "asc")).skip(skip).limit(limit)
    employees = [serialize_employee(doc) async for doc in cursor]
    return format_response(
        success=True,
        data={"employees": employees, "total": total, "search": search},
    )


@router.get("/{employee_id}", summary="Get one employee")
async def get_employee(
    employee_id: str,
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await _get_or_404(db, employee_id)
    return format_response(success=True, data={"employee": serialize_employee(doc)})


@router.put("/{employee_id}", summary="Edit an employee")
async def edit_employee(
    employee_id: str,
    name: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    salary: Optional[float] = Form(None),
    contact: Optional[str] = Form(None),
    doj: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    existing = await _get_or_404(db, employee_id)
    fields = {"name": name, "role": role, "salary": salary, "contact": contact, "doj": doj}
    updates = {k: v for k, v in fields.items() if v is not None}

    new_photo = await _store_photo(photo)
    if new_photo:
        updates["photo"] = new_photo
        remove_upload(existing.get("photo"))

    if updates:
        await db[EMPLOYEES].update_one({"_id": existing["_id"]}, {"$set": updates})
    doc = await db[EMPLOYEES].find_one({"_id": existing["_id"]})
    return format_response(success=True, data={"employee": serialize_employee(doc)})


@router.delete("/{employee_id}", summary="Delete an employee")
async def delete_employee(
    employee_id: str,
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await _get_or_404(db, employee_id)
    await db[EMPLOYEES].delete_one({"_id": doc["_id"]})
    remove_upload(doc.get("photo"))
    return format_response(success=True, message="Employee deleted")


async def _set_status(db: AsyncIOMotorDatabase, employee_id: str, status: EmployeeStatus) -> dict:
    doc = await _get_or_404(db, employee_id)
    await db[EMPLOYEES].update_one({"_id": doc["_id"]}, {"$set": {"status": status}})
    doc["status"] = status
    return format_response(success=True, data={"employee": serialize_employee(doc)})


@router.post("/{employee_id}/activate")
async def activate_employee(
    employee_id: str,
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await _set_status(db, employee_id, "Active")


@router.post("/{employee_id}/deactivate")
async def deactivate_employee(
    employee_id: str,
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await _set_status(db, employee_id, "Inactive")
