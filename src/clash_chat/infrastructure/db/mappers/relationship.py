from __future__ import annotations

from clash_chat.domain.entities.relationship import Relationship
from clash_chat.infrastructure.db.models.relationship import RelationshipModel


def model_to_entity(model: RelationshipModel) -> Relationship:
    return Relationship(
        id=model.id,
        requester_id=model.requester_id,
        recipient_id=model.recipient_id,
        status=model.status,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: Relationship) -> RelationshipModel:
    return RelationshipModel(
        id=entity.id,
        requester_id=entity.requester_id,
        recipient_id=entity.recipient_id,
        status=entity.status,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
