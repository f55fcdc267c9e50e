import logging
import os
import shutil
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.api import deps
from app.core import security
from app.core.config import settings
from app.core.database import get_db
from app.models import Grade, LearningMaterial, Subject, User, UserRole
from app.models.lms import MaterialType
from app.schemas.lms import LearningMaterialResponse

logger = logging.getLogger(__name__)

router = APIRouter()

MATERIALS_DIR = "materials"
ALLOWED_EXTENSIONS = ["pdf", "doc", "docx", "ppt", "pptx", "xls", "xlsx", "txt", "png", "jpg", "jpeg", "mp4"]


@router.get("/", response_model=List[LearningMaterialResponse])
def get_learning_materials(
    grade_id: Optional[UUID] = None,
    subject_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    query = db.query(LearningMaterial)
    if grade_id:
        query = query.filter(LearningMaterial.grade_id == grade_id)
    if subject_id:
        query = query.filter(LearningMaterial.subject_id == subject_id)
    return query.order_by(LearningMaterial.created_at.desc()).all()


@router.post("/", response_model=LearningMaterialResponse, status_code=201)
def upload_learning_material(
    title: str = Form(...),
    description: Optional[str] = Form(None),
    material_type: MaterialType = Form(MaterialType.notes),
    subject_id: UUID = Form(...),
    grade_id: UUID = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_teacher),
):
    if not db.query(Subject).filter(Subject.id == subject_id).first():
        raise HTTPException(status_code=404, detail="Subject not found")
    if not db.query(Grade).filter(Grade.id == grade_id).first():
        raise HTTPException(status_code=404, detail="Grade not found")
    if not security.validate_file_extension(file.filename, ALLOWED_EXTENSIONS):
        raise HTTPException(status_code=400, detail="File type not allowed")

    upload_dir = os.path.join(settings.UPLOAD_DIR, MATERIALS_DIR)
    os.makedirs(upload_dir, exist_ok=True)
    filename = security.generate_secure_filename(file.filename)
    with open(os.path.join(upload_dir, filename), "wb") as buffer:
        shutil.copyfileobj(file.file, buffer)

    material = LearningMaterial(
        title=title,
        description=description or None,
        file_url=f"/uploads/{MATERIALS_DIR}/{filename}",
        material_type=material_type.value,
        subject_id=subject_id,
        grade_id=grade_id,
        uploaded_by=current_user.id,
    )
    db.add(material)
    db.commit()
    db.refresh(material)
    logger.info("Learning material %s uploaded by %s", material.id, current_user.email)
    return material


@router.delete("/{material_id}")
def delete_learning_material(
    material_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_teacher),
):
    material = db.query(LearningMaterial).filter(LearningMaterial.id == material_id).first()
    if not material:
        raise HTTPException(status_code=404, detail="Learning material not found")
    if current_user.role != UserRole.admin and material.uploaded_by != current_user.id:
        raise HTTPException(status_code=403, detail="You can only delete your own materials")

    path = os.path.join(settings.UPLOAD_DIR, material.file_url.removeprefix("/uploads/"))
    db.delete(material)
    db.commit()
    if os.path.exists(path):
        os.remove(path)
    return {"message": "Learning material deleted"}
