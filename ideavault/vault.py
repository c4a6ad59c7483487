"""Operations on a vault: the API the command layer calls."""

import copy
from collections import Counter
from collections.abc import Callable, Iterable
from datetime import date
from typing import Any

import structlog

from ideavault.errors import NotFoundError, ValidationError
from ideavault.filters import Bound, FilterSpec, filter_entities
from ideavault.links import LinkManager, attach_idea
from ideavault.models import ENTITY_TYPES, Entity, EntityKind, Idea, Project, Task, check_clearable
from ideavault.repository import Repository
from ideavault.search import SearchResult, SearchScope, search

logger = structlog.get_logger()


class Vault:
    """Ideas, projects and tasks stored in one repository.

    Every method loads what it needs, works in memory and saves before
    returning. On error nothing is saved.
    """

    def __init__(self, repository: Repository, today: Callable[[], date] | None = None) -> None:
        """Initialize a vault.

        Args:
            repository: Storage for the three entity collections
            today: Source of the current date, used for overdue checks
        """
        self.repository = repository
        self.links = LinkManager(repository)
        self.today = today or date.today

    # Create

    def create_idea(
        self,
        title: str,
        description: str | None = None,
        tags: Iterable[str] = (),
        status: Any = None,
        project_id: str | None = None,
    ) -> Idea:
        idea = Idea.new(title, description=description, tags=tags, status=status)
        logger.info("Creating idea", idea_id=idea.id, title=idea.title, project_id=project_id)

        collections = self.repository.load_collections()
        if project_id:
            collections.find(EntityKind.PROJECT, project_id)
        collections.ideas.append(idea)

        kinds = [EntityKind.IDEA]
        if project_id:
            attach_idea(collections, project_id, idea.id)
            kinds.append(EntityKind.PROJECT)
        self.repository.save_collections({kind: collections.of(kind) for kind in kinds})
        logger.info("Idea created", idea_id=idea.id)
        return idea

    def create_project(
        self,
        title: str,
        description: str | None = None,
        tags: Iterable[str] = (),
        status: Any = None,
        milestone: str | None = None,
        url: str | None = None,
        repo_url: str | None = None,
        idea_ids: Iterable[str] = (),
    ) -> Project:
        project = Project.new(
            title,
            description=description,
            tags=tags,
            status=status,
            milestone=milestone,
            url=url,
            repo_url=repo_url,
        )
        idea_ids = list(idea_ids)
        logger.info("Creating project", project_id=project.id, title=project.title, idea_ids=idea_ids)

        collections = self.repository.load_collections()
        for idea_id in idea_ids:
            collections.find(EntityKind.IDEA, idea_id)
        collections.projects.append(project)

        kinds = [EntityKind.PROJECT]
        if idea_ids:
            for idea_id in idea_ids:
                attach_idea(collections, project.id, idea_id)
            kinds.append(EntityKind.IDEA)
        self.repository.save_collections({kind: collections.of(kind) for kind in kinds})
        logger.info("Project created", project_id=project.id)
        return project

    def create_task(
        self,
        title: str,
        description: str | None = None,
        tags: Iterable[str] = (),
        status: Any = None,
        priority: Any = None,
        due_date: date | str | None = None,
        project_id: str | None = None,
        idea_id: str | None = None,
    ) -> Task:
        task = Task.new(title, description=description, tags=tags, status=status, priority=priority, due_date=due_date)
        logger.info("Creating task", task_id=task.id, title=task.title, project_id=project_id, idea_id=idea_id)

        collections = self.repository.load_collections()
        if project_id:
            collections.find(EntityKind.PROJECT, project_id)
            task.project_id = project_id
        if idea_id:
            collections.find(EntityKind.IDEA, idea_id)
            task.idea_id = idea_id
        collections.tasks.append(task)

        self.repository.save_all(EntityKind.TASK, collections.tasks)  # type: ignore[arg-type]
        logger.info("Task created", task_id=task.id)
        return task

    # Read

    def get_idea(self, idea_id: str) -> Idea:
        return self.repository.find_by_id(EntityKind.IDEA, idea_id)  # type: ignore[return-value]

    def get_project(self, project_id: str) -> Project:
        return self.repository.find_by_id(EntityKind.PROJECT, project_id)  # type: ignore[return-value]

    def get_task(self, task_id: str) -> Task:
        return self.repository.find_by_id(EntityKind.TASK, task_id)  # type: ignore[return-value]

    def list_ideas(
        self,
        status: Any = None,
        tag: str | None = None,
        project_id: str | None = None,
        created_from: Bound = None,
        created_to: Bound = None,
    ) -> list[Idea]:
        spec = FilterSpec(
            status=status, tag=tag, project_id=project_id, created_from=created_from, created_to=created_to
        )
        return self._list(EntityKind.IDEA, spec)

    def list_projects(
        self,
        status: Any = None,
        tag: str | None = None,
        created_from: Bound = None,
        created_to: Bound = None,
    ) -> list[Project]:
        spec = FilterSpec(status=status, tag=tag, created_from=created_from, created_to=created_to)
        return self._list(EntityKind.PROJECT, spec)

    def list_tasks(
        self,
        status: Any = None,
        tag: str | None = None,
        priority: Any = None,
        project_id: str | None = None,
        idea_id: str | None = None,
        overdue: bool = False,
        created_from: Bound = None,
        created_to: Bound = None,
    ) -> list[Task]:
        spec = FilterSpec(
            status=status,
            tag=tag,
            priority=priority,
            project_id=project_id,
            idea_id=idea_id,
            overdue=overdue,
            created_from=created_from,
            created_to=created_to,
        )
        return self._list(EntityKind.TASK, spec)

    def _list(self, kind: EntityKind, spec: FilterSpec) -> list[Any]:
        logger.debug("Listing entities", kind=kind.value, spec=spec)
        # Validate before touching storage.
        spec.compile(kind, self.today())
        return filter_entities(self.repository.load_all(kind), spec, kind, today=self.today())

    def project_ideas(self, project_id: str) -> list[Idea]:
        """Ideas linked to a project, oldest first."""
        collections = self.repository.load_collections()
        project: Project = collections.find(EntityKind.PROJECT, project_id)
        ideas = [idea for idea in collections.ideas if idea.id in project.idea_ids]
        return sorted(ideas, key=lambda idea: idea.created_at)

    def project_tasks(self, project_id: str) -> list[Task]:
        """Tasks pointing at a project, oldest first."""
        collections = self.repository.load_collections()
        collections.find(EntityKind.PROJECT, project_id)
        tasks = [task for task in collections.tasks if task.project_id == project_id]
        return sorted(tasks, key=lambda task: task.created_at)

    def tag_counts(self) -> dict[str, int]:
        """Number of entities carrying each tag, across all kinds, sorted by tag."""
        counts: Counter[str] = Counter()
        collections = self.repository.load_collections()
        for kind in EntityKind:
            for entity in collections.of(kind):
                counts.update(entity.tags)
        return dict(sorted(counts.items()))

    def search(
        self,
        query: str = "",
        scope: SearchScope | str = SearchScope.ALL,
        with_tags: Iterable[str] = (),
        status: Any = None,
        date_from: Bound = None,
        date_to: Bound = None,
    ) -> list[SearchResult]:
        return search(
            self.repository.load_collections(),
            query,
            scope=scope,
            with_tags=with_tags,
            status=status,
            date_from=date_from,
            date_to=date_to,
        )

    # Update

    def update_idea(
        self,
        idea_id: str,
        title: str | None = None,
        description: str | None = None,
        status: Any = None,
        tags: Iterable[str] | None = None,
        add_tags: Iterable[str] = (),
        remove_tags: Iterable[str] = (),
        clear: Iterable[str] = (),
    ) -> Idea:
        changes = {"title": title, "description": description, "status": status, "tags": tags}
        return self._update(EntityKind.IDEA, idea_id, changes, add_tags, remove_tags, clear)

    def update_project(
        self,
        project_id: str,
        title: str | None = None,
        description: str | None = None,
        status: Any = None,
        tags: Iterable[str] | None = None,
        milestone: str | None = None,
        url: str | None = None,
        repo_url: str | None = None,
        add_tags: Iterable[str] = (),
        remove_tags: Iterable[str] = (),
        clear: Iterable[str] = (),
    ) -> Project:
        changes = {
            "title": title,
            "description": description,
            "status": status,
            "tags": tags,
            "milestone": milestone,
            "url": url,
            "repo_url": repo_url,
        }
        return self._update(EntityKind.PROJECT, project_id, changes, add_tags, remove_tags, clear)

    def update_task(
        self,
        task_id: str,
        title: str | None = None,
        description: str | None = None,
        status: Any = None,
        priority: Any = None,
        due_date: date | str | None = None,
        tags: Iterable[str] | None = None,
        add_tags: Iterable[str] = (),
        remove_tags: Iterable[str] = (),
        clear: Iterable[str] = (),
    ) -> Task:
        changes = {
            "title": title,
            "description": description,
            "status": status,
            "priority": priority,
            "due_date": due_date,
            "tags": tags,
        }
        return self._update(EntityKind.TASK, task_id, changes, add_tags, remove_tags, clear)

    def _update(
        self,
        kind: EntityKind,
        entity_id: str,
        changes: dict[str, Any],
        add_tags: Iterable[str],
        remove_tags: Iterable[str],
        clear: Iterable[str],
    ) -> Any:
        """Apply a partial edit to a copy of the entity and save it if anything changed.

        Raises:
            ValidationError: For an invalid value, an unknown clear field, or a
                field that is both set and cleared
            NotFoundError: If the entity does not exist
        """
        clear = check_clearable(ENTITY_TYPES[kind], clear)
        changes = {name: value for name, value in changes.items() if value is not None}
        for name in clear:
            if name in changes:
                raise ValidationError(f"Cannot both set and clear '{name}'")
        add_tags, remove_tags = list(add_tags), list(remove_tags)

        items = self.repository.load_all(kind)
        index = next((i for i, item in enumerate(items) if item.id == entity_id), None)
        if index is None:
            raise NotFoundError(kind.value, entity_id)

        if not (changes or add_tags or remove_tags or clear):
            logger.info("No changes specified", kind=kind.value, entity_id=entity_id)
            return items[index]

        entity: Entity = copy.deepcopy(items[index])
        for name, value in changes.items():
            getattr(entity, f"set_{name}")(value)
        for tag in add_tags:
            entity.add_tag(tag)
        for tag in remove_tags:
            entity.remove_tag(tag)
        for name in clear:
            entity.clear(name)

        items[index] = entity
        self.repository.save_all(kind, items)
        logger.info("Entity updated", kind=kind.value, entity_id=entity_id, fields=[*changes, *clear])
        return entity

    # Delete

    def delete_idea(self, idea_id: str) -> Idea:
        return self.links.delete(EntityKind.IDEA, idea_id)  # type: ignore[return-value]

    def delete_project(self, project_id: str) -> Project:
        return self.links.delete(EntityKind.PROJECT, project_id)  # type: ignore[return-value]

    def delete_task(self, task_id: str) -> Task:
        return self.links.delete(EntityKind.TASK, task_id)  # type: ignore[return-value]

    # Links

    def link_idea_to_project(self, project_id: str, idea_id: str) -> Project:
        return self.links.link_idea_to_project(project_id, idea_id)

    def unlink_idea_from_project(self, project_id: str, idea_id: str) -> Project:
        return self.links.unlink_idea_from_project(project_id, idea_id)

    def link_task_to_project(self, task_id: str, project_id: str) -> Task:
        return self.links.link_task_to_project(task_id, project_id)

    def link_task_to_idea(self, task_id: str, idea_id: str) -> Task:
        return self.links.link_task_to_idea(task_id, idea_id)

    def unlink_task_from_project(self, task_id: str) -> Task:
        return self.links.unlink_task_from_project(task_id)

    def unlink_task_from_idea(self, task_id: str) -> Task:
        return self.links.unlink_task_from_idea(task_id)
