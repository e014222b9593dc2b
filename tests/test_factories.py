import functools
import unittest
from typing import Protocol, runtime_checkable
from unittest.mock import MagicMock

import pytest

from singlebind import Container, DuplicateRegistration


class Settings:
    def __init__(self):
        self.url = "sqlite://"


class Database:
    def __init__(self, url: str):
        self.url = url


class InfoLogger(Protocol):
    def info(self, msg: object, *args: object) -> None: ...


@runtime_checkable
class Repo(Protocol):
    def get(self) -> int: ...


class RepoImpl:
    def get(self) -> int:
        return 1


class NullLogger:
    def info(self, msg: object, *args: object) -> None:
        pass


class Service:
    def __init__(self, db: Database, logger: InfoLogger):
        self.db = db
        self.logger = logger
        self.logger.info("service ready")


class TestFactoryRegistration(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container(Settings)

    def test_factory_receives_resolved_dependencies(self):
        def make_db(settings: Settings) -> Database:
            return Database(settings.url)

        self.cont.register(Database, factory=make_db)
        db = self.cont.resolve(Database)
        assert db.url == "sqlite://"
        assert self.cont.resolve(Database) is db

    def test_factory_is_called_once(self):
        calls = []

        def make_db() -> Database:
            calls.append(1)
            return Database("memory://")

        self.cont.register(Database, factory=make_db)
        self.cont.resolve(Database)
        self.cont.resolve(Database)
        assert calls == [1]

    def test_factory_result_of_wrong_type_raises(self):
        self.cont.register(Database, factory=lambda: object())
        with pytest.raises(TypeError):
            self.cont.resolve(Database)
        assert not self.cont.is_cached(Database)

    def test_factory_for_runtime_protocol_checks_result(self):
        self.cont.register(Repo, factory=RepoImpl)
        repo = self.cont.resolve(Repo)
        assert isinstance(repo, RepoImpl)
        assert repo.get() == 1

    def test_factory_for_runtime_protocol_rejects_non_conforming(self):
        self.cont.register(Repo, factory=Settings)
        with pytest.raises(TypeError):
            self.cont.resolve(Repo)

    def test_partial_factory_resolves_remaining_dependencies(self):
        self.cont.register(Pool, factory=functools.partial(Pool, size=8))
        pool = self.cont.resolve(Pool)
        assert pool.size == 8
        assert pool.settings is self.cont.resolve(Settings)

    def test_callable_object_factory_resolves_dependencies(self):
        self.cont.register(Pool, factory=PoolBuilder())
        pool = self.cont.resolve(Pool)
        assert pool.size == 4
        assert pool.settings is self.cont.resolve(Settings)

    def test_factory_class_constructor_is_inspected(self):
        class Child(Database):
            def __init__(self, settings: Settings):
                super().__init__(settings.url)

        self.cont.register(Database, factory=Child)
        assert self.cont.lookup(Database).parameter_types == (Settings,)
        db = self.cont.resolve(Database)
        assert isinstance(db, Child)


class Pool:
    def __init__(self, settings: Settings, size: int):
        self.settings = settings
        self.size = size


class PoolBuilder:
    def __call__(self, settings: Settings) -> "Pool":
        return Pool(settings, 4)


class TestInstanceRegistration(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container(Service)
        self.cont.register(Database, factory=lambda: Database("memory://"))

    def test_registered_instance_is_injected(self):
        logger = NullLogger()
        logger.info = MagicMock(wraps=logger.info)
        self.cont.register_instance(InfoLogger, logger)

        svc = self.cont.resolve(Service)
        assert svc.logger is logger
        logger.info.assert_called_once_with("service ready")

    def test_registered_instance_is_cached_and_registered(self):
        settings = Settings()
        self.cont.register_instance(Settings, settings)
        assert Settings in self.cont
        assert self.cont.is_cached(Settings)
        assert self.cont.resolve(Settings) is settings

    def test_register_instance_of_wrong_type_raises(self):
        with pytest.raises(TypeError):
            self.cont.register_instance(Settings, Database("x"))

    def test_register_instance_twice_raises(self):
        first = Settings()
        self.cont.register_instance(Settings, first)
        with pytest.raises(DuplicateRegistration):
            self.cont.register_instance(Settings, Settings())
        assert self.cont.resolve(Settings) is first

    def test_register_instance_for_non_class_token_is_registered_and_cached(self):
        token = Settings | None
        settings = Settings()
        self.cont.register_instance(token, settings)
        assert token in self.cont
        assert self.cont.is_cached(token)
        assert self.cont.resolve(token) is settings
