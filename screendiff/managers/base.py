import uuid
from typing import Generic, TypeVar, get_args, Union

import sqlalchemy as db
from sqlalchemy import event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import MissingGreenlet, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, load_only
from sqlalchemy.orm.exc import DetachedInstanceError

from screendiff.exceptions.base import GenericSchemaException, DBErrorCode

FILTERS = dict[str, Union[str, int, bool, None, list]]

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests)
JSONType = db.JSON().with_variant(JSONB(), "postgresql")


class BaseSchema(DeclarativeBase):
    __abstract__ = True

    uid = db.Column(db.String, primary_key=True, default=lambda: f"{uuid.uuid4()}",
                    info={"readonly": True})
    created_at = db.Column(db.DateTime(timezone=True), server_default=db.func.now(),
                           info={"readonly": True})
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=db.func.now(),
                           info={"readonly": True})

    @classmethod
    def __declare_last__(cls):
        event.listen(cls, "before_insert", cls._uid_prepend_listener)

    @staticmethod
    def _uid_prepend_listener(_, __, target):
        if not target.uid:
            target.uid = f"{target.__tablename__.lower()}_{uuid.uuid4()}"

    def safe_getattr(self, attr: str):
        try:
            return getattr(self, attr)
        except MissingGreenlet:
            return None
        except DetachedInstanceError:
            return None

    def model_dump(self, *exclude, sanitize=False) -> dict:
        dump = {}
        for col in self.__table__.columns:  # noqa
            if col.key in exclude: continue
            dump[col.key] = self.safe_getattr(col.key)
        for relation in self.__mapper__.relationships:  # noqa
            if relation.key in exclude: continue
            rel = self.safe_getattr(relation.key)
            if rel is None:
                dump[relation.key] = None
            elif relation.uselist:
                dump[relation.key] = [related.model_dump(*exclude, sanitize=sanitize) for related in rel]
            else:
                dump[relation.key] = rel.model_dump(*exclude, sanitize=sanitize)
        return {k: v for k, v in dump.items() if not sanitize or (v not in (None, []))}


SchemaType = TypeVar("SchemaType", bound=BaseSchema)


class GenericManager(Generic[SchemaType]):
    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = sessionmaker(  # noqa
            bind=self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    async def init_db(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(BaseSchema.metadata.create_all)

    @property
    def Schema(self) -> type[SchemaType]:
        return get_args(self.__orig_bases__[0])[0]  # noqa

    async def _flush(self, session: AsyncSession):
        try:
            await session.flush()
        except IntegrityError as e:
            raise GenericSchemaException(409, DBErrorCode.DB_INTEGRITY_ERROR, self.Schema, extras=str(e.orig))

    @staticmethod
    def _filter(query: db.Select, filters: FILTERS, schema: type[BaseSchema]) -> db.Select:
        for column, condition in filters.items():
            if isinstance(condition, list):
                query = query.filter(getattr(schema, column).in_(condition))
            else:
                query = query.filter(getattr(schema, column) == condition)  # noqa
        return query

    async def create(self, data: SchemaType, *, session: AsyncSession = None) -> SchemaType:
        if session:
            session.add(data)
            await self._flush(session)
            return await self.fetch(data.uid, session=session)  # noqa
        async with self.session_factory() as session:
            record = await GenericManager.create(self, data, session=session)
            await session.commit()
            return record

    async def create_all(self, data: list[SchemaType], *, session: AsyncSession = None) -> list[SchemaType]:
        if session:
            session.add_all(data)
            await self._flush(session)
            return data
        async with self.session_factory() as session:
            records = await GenericManager.create_all(self, data, session=session)
            await session.commit()
            return records

    async def fetch(self, uid: str, *, session: AsyncSession = None) -> SchemaType:
        if session:
            query = db.select(self.Schema).filter_by(uid=uid)
            record = await session.execute(query)
            record = record.unique().scalar_one_or_none()
            if record is None: raise GenericSchemaException(404, DBErrorCode.DB_NOT_FOUND, self.Schema)
            return record
        async with self.session_factory() as session:
            return await GenericManager.fetch(self, uid, session=session)

    async def fetch_all(
            self,
            limit: int = 0,
            offset: int = 0,
            filters: FILTERS = None,
            sorts: list[str] = None,
            *,
            session: AsyncSession = None,
            include: list[str] = None,
    ) -> list[SchemaType]:
        """`sorts` entries are column names, prefixed with "-" for descending order."""
        if session:
            query = db.select(self.Schema)
            if include: query = query.options(load_only(
                *(getattr(self.Schema, col.name) for col in self.Schema.__table__.columns if col.name in include))  # noqa
            )
            if filters: query = self._filter(query, filters, self.Schema)
            for sort in sorts or []:
                descending = sort.startswith("-")
                col = getattr(self.Schema, sort.lstrip("-").lstrip("+"))
                query = query.order_by(col.desc() if descending else col.asc())
            if limit: query = query.limit(limit)
            query = query.offset(offset)
            records = await session.execute(query)
            return list(records.unique().scalars())
        async with self.session_factory() as session:
            return await GenericManager.fetch_all(
                self, limit, offset, filters, sorts, session=session, include=include,
            )

    async def update(self, uid: str, updates: dict, *, session: AsyncSession = None) -> SchemaType:
        if session:
            record = await GenericManager.fetch(self, uid, session=session)
            for col, val in updates.items(): setattr(record, col, val)
            await self._flush(session)
            return record
        async with self.session_factory() as session:
            record = await GenericManager.update(self, uid, updates, session=session)
            await session.commit()
            return record

    async def delete(self, uid: str, *, session: AsyncSession = None) -> SchemaType:
        if session:
            record = await GenericManager.fetch(self, uid, session=session)
            await session.delete(record)
            await self._flush(session)
            return record
        async with self.session_factory() as session:
            record = await GenericManager.delete(self, uid, session=session)
            await session.commit()
            return record


__all__ = ["BaseSchema", "GenericManager", "JSONType"]
