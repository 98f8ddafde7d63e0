"""
Tags de una escuela.

Sirven para agrupar usuarios (p.ej. "5to A") y dirigir anuncios a esos
grupos. Solo docentes y administradores pueden manejarlos.
"""
import logging

from schoolhub.cql.result import ResultCode
from schoolhub.models import ALLOWED_COLOURS, Tag
from schoolhub.services.base import ServiceError, expect, listing, new_id, service_call, tolerate
from schoolhub.services.relations import GONE, RelationsService

logger = logging.getLogger(__name__)

MAX_VALUE_LENGTH = 50


def validate_tag(value, colour):
    if not value or len(value) > MAX_VALUE_LENGTH:
        raise ServiceError(400, "Invalid tag value")
    if colour not in ALLOWED_COLOURS:
        raise ServiceError(400, "Invalid tag colour")


class TagService(RelationsService):

    def _teacher_from_token(self, school_id, token, action):
        user = self._user_from_token(school_id, token)
        self._require_teacher(user, message=f"You are not allowed to {action} tags")
        return user

    def _get_tag(self, school_id, tag_id):
        result, tag = self.tables.tags.get(school_id, tag_id)
        expect(result, "get tag", NOT_FOUND=(404, "Tag not found"))
        return tag

    def _check_user(self, school_id, user_id):
        result, _ = self.tables.users.get(school_id, user_id)
        expect(result, "get user", NOT_FOUND=(404, "User not found"))

    def _tags_json(self, school_id, tag_ids):
        tags = []
        for tag_id in tag_ids:
            result, tag = self.tables.tags.get(school_id, tag_id)
            if result.code == ResultCode.NOT_FOUND:
                logger.warning("Dangling tag %s in school %s", tag_id, school_id)
                continue
            expect(result, "get tag")
            tags.append(tag.to_json(secure=True))
        return tags

    # ==========================================
    # TAGS
    # ==========================================

    @service_call
    def create_tag(self, school_id, token, value, colour):
        self._teacher_from_token(school_id, token, "create")
        validate_tag(value, colour)

        tag = Tag(school_id, new_id(), value, colour)
        expect(self.tables.tags.create(tag), "create tag")
        return 201, tag.to_json(secure=True)

    @service_call
    def get_tag(self, school_id, token, tag_id):
        self._teacher_from_token(school_id, token, "see")
        return 200, self._get_tag(school_id, tag_id).to_json(secure=True)

    @service_call
    def get_all_tags(self, school_id, token):
        self._teacher_from_token(school_id, token, "see")
        result, tags = self.tables.tags.get_many("by_school", school_id)
        tags = listing(result, tags, "list tags")
        return 200, [t.to_json(secure=True) for t in tags]

    @service_call
    def update_tag(self, school_id, token, tag_id, value=None, colour=None):
        self._teacher_from_token(school_id, token, "update")
        if value is None and colour is None:
            raise ServiceError(400, "No value or colour provided")

        tag = self._get_tag(school_id, tag_id)
        value = tag.value if value is None else value
        colour = tag.colour if colour is None else colour
        validate_tag(value, colour)

        result = self.tables.tags.update((school_id, tag_id), value=value, colour=colour)
        expect(result, "update tag", NOT_APPLIED=(404, "Tag not found"))
        return 200, {}

    @service_call
    def delete_tag(self, school_id, token, tag_id):
        """Quita el tag a todos sus usuarios y anuncios y después lo borra."""
        self._teacher_from_token(school_id, token, "delete")
        self._get_tag(school_id, tag_id)

        for user_id in self._members(self.tables.users_by_tag, school_id, tag_id):
            tolerate(self.tables.tags_by_user.unlink(school_id, user_id, tag_id),
                     "unlink tag from user", *GONE)
        expect(self.tables.users_by_tag.unlink_all(school_id, tag_id), "unlink users of tag")
        expect(self.tables.announcements_by_tag.unlink_all(school_id, tag_id),
               "unlink announcements of tag")

        result = self.tables.tags.delete(school_id, tag_id)
        expect(result, "delete tag", NOT_APPLIED=(404, "Tag not found"))
        return 200, {}

    # ==========================================
    # RELACIÓN TAG - USUARIO
    # ==========================================

    @service_call
    def create_tag_user_relation(self, school_id, token, tag_id, user_id):
        self._teacher_from_token(school_id, token, "assign")
        self._check_user(school_id, user_id)
        self._get_tag(school_id, tag_id)

        already = (400, "The user already has this tag")
        expect(self.tables.users_by_tag.link(school_id, tag_id, user_id),
               "link user to tag", NOT_APPLIED=already)
        expect(self.tables.tags_by_user.link(school_id, user_id, tag_id),
               "link tag to user", NOT_APPLIED=already)
        return 200, {}

    @service_call
    def delete_tag_user_relation(self, school_id, token, tag_id, user_id):
        self._teacher_from_token(school_id, token, "remove")

        missing = (404, "No relation found")
        expect(self.tables.users_by_tag.unlink(school_id, tag_id, user_id),
               "unlink user from tag", NOT_APPLIED=missing)
        expect(self.tables.tags_by_user.unlink(school_id, user_id, tag_id),
               "unlink tag from user", NOT_APPLIED=missing)
        return 200, {}

    @service_call
    def get_users_by_tag(self, school_id, token, tag_id):
        self._teacher_from_token(school_id, token, "see")
        self._get_tag(school_id, tag_id)

        users = []
        for user_id in self._members(self.tables.users_by_tag, school_id, tag_id):
            result, user = self.tables.users.get(school_id, user_id)
            if result.code == ResultCode.NOT_FOUND:
                logger.warning("Dangling user %s under tag %s", user_id, tag_id)
                continue
            expect(result, "get user")
            users.append(user.to_json(secure=True))
        return 200, users

    @service_call
    def get_tags_by_user(self, school_id, token, user_id=None):
        """Sin user_id devuelve los tags propios; los de otro usuario solo para docentes."""
        requester = self._user_from_token(school_id, token)
        if user_id is None or user_id == requester.user_id:
            user_id = requester.user_id
        else:
            self._require_teacher(requester, message="You are not allowed to see tags")
            self._check_user(school_id, user_id)

        tag_ids = self._members(self.tables.tags_by_user, school_id, user_id)
        return 200, self._tags_json(school_id, tag_ids)
