"""
characters.py

롤플레이 캐릭터 뷰어 API.

- 공개: 게시(is_published)된 캐릭터 목록 / 상세
- 관리자: 전체 목록 / 생성 / 수정 / 삭제

"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_admin
from app.core.errors import NotFound
from app.models.character import Character
from app.models.user import User
from app.schemas.character import CharacterCreate, CharacterResponse, CharacterUpdate
from app.services.content import apply_changes, get_or_404

router = APIRouter(prefix="/characters", tags=["characters"])
admin_router = APIRouter(prefix="/admin/characters", tags=["admin-characters"])


@router.get("")
def list_characters(db: Session = Depends(get_db)):
    characters = db.scalars(
        select(Character).where(Character.is_published.is_(True)).order_by(Character.name, Character.id)
    )
    return {"items": [CharacterResponse.model_validate(c) for c in characters]}


@router.get("/{character_id}")
def get_character(character_id: int, db: Session = Depends(get_db)):
    character = db.get(Character, character_id)
    if not character or not character.is_published:
        raise NotFound("Character not found")
    return {"character": CharacterResponse.model_validate(character)}


@admin_router.get("")
def admin_list_characters(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    characters = db.scalars(select(Character).order_by(Character.name, Character.id))
    return {"items": [CharacterResponse.model_validate(c) for c in characters]}


@admin_router.post("", status_code=status.HTTP_201_CREATED)
def create_character(
    body: CharacterCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    character = Character(**body.model_dump())
    db.add(character)
    db.commit()
    db.refresh(character)
    return {"success": True, "character": CharacterResponse.model_validate(character)}


@admin_router.put("/{character_id}")
def update_character(
    character_id: int,
    body: CharacterUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    character = get_or_404(db, Character, character_id, "Character")
    apply_changes(character, body)
    db.commit()
    db.refresh(character)
    return {"success": True, "character": CharacterResponse.model_validate(character)}


@admin_router.delete("/{character_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_character(
    character_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    character = get_or_404(db, Character, character_id, "Character")
    db.delete(character)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
