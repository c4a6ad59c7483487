"""Links between ideas, projects and tasks, with cleanup on delete."""

import structlog

from ideavault.models import Entity, EntityKind, Idea, Project, Task
from ideavault.repository import Collections, Repository

logger = structlog.get_logger()

_IDEAS_AND_PROJECTS = (EntityKind.IDEA, EntityKind.PROJECT)


def attach_idea(collections: Collections, project_id: str, idea_id: str) -> Project:
    """Link an idea and a project in both directions.

    An idea belongs to at most one project, so an idea already attached
    elsewhere is detached from its previous project first.
    """
    project: Project = collections.find(EntityKind.PROJECT, project_id)
    idea: Idea = collections.find(EntityKind.IDEA, idea_id)

    if idea.project_id and idea.project_id != project_id and collections.contains(
        EntityKind.PROJECT, idea.project_id
    ):
        previous: Project = collections.find(EntityKind.PROJECT, idea.project_id)
        previous.remove_idea(idea_id)
        logger.debug("Moved idea away from previous project", idea_id=idea_id, project_id=previous.id)

    project.add_idea(idea_id)
    idea.set_project(project_id)
    return project


def detach_idea(collections: Collections, project_id: str, idea_id: str) -> Project:
    """Remove the link between an idea and a project; a missing link is not an error."""
    project: Project = collections.find(EntityKind.PROJECT, project_id)
    project.remove_idea(idea_id)
    for idea in collections.ideas:
        if idea.id == idea_id and idea.project_id == project_id:
            idea.clear_project()
    return project


def attach_task_to_project(collections: Collections, task_id: str, project_id: str) -> Task:
    task: Task = collections.find(EntityKind.TASK, task_id)
    collections.find(EntityKind.PROJECT, project_id)
    task.set_project(project_id)
    return task


def attach_task_to_idea(collections: Collections, task_id: str, idea_id: str) -> Task:
    task: Task = collections.find(EntityKind.TASK, task_id)
    collections.find(EntityKind.IDEA, idea_id)
    task.set_idea(idea_id)
    return task


def remove_with_cascade(
    collections: Collections, kind: EntityKind, entity_id: str
) -> tuple[Entity, tuple[EntityKind, ...]]:
    """Remove an entity and scrub every reference that pointed at it.

    Returns:
        The removed entity and the kinds whose collections changed
    """
    removed = collections.remove(kind, entity_id)
    touched = {kind}

    if kind is EntityKind.PROJECT:
        for idea in collections.ideas:
            if idea.project_id == entity_id:
                idea.clear_project()
                touched.add(EntityKind.IDEA)
        for task in collections.tasks:
            if task.project_id == entity_id:
                task.clear_project()
                touched.add(EntityKind.TASK)
    elif kind is EntityKind.IDEA:
        for project in collections.projects:
            if entity_id in project.idea_ids:
                project.remove_idea(entity_id)
                touched.add(EntityKind.PROJECT)
        for task in collections.tasks:
            if task.idea_id == entity_id:
                task.clear_idea()
                touched.add(EntityKind.TASK)

    return removed, tuple(k for k in EntityKind if k in touched)


class LinkManager:
    """Maintains references between entities through a repository.

    Each operation loads all collections, applies the change in memory and
    persists the touched collections together.
    """

    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    def _commit(self, collections: Collections, kinds: tuple[EntityKind, ...]) -> None:
        self.repository.save_collections({kind: collections.of(kind) for kind in kinds})

    def link_idea_to_project(self, project_id: str, idea_id: str) -> Project:
        """Link an idea to a project; linking an existing pair again adds no duplicate."""
        logger.info("Linking idea to project", project_id=project_id, idea_id=idea_id)
        collections = self.repository.load_collections()
        project = attach_idea(collections, project_id, idea_id)
        self._commit(collections, _IDEAS_AND_PROJECTS)
        return project

    def unlink_idea_from_project(self, project_id: str, idea_id: str) -> Project:
        """Unlink an idea from a project. Only a missing project is an error."""
        logger.info("Unlinking idea from project", project_id=project_id, idea_id=idea_id)
        collections = self.repository.load_collections()
        project = detach_idea(collections, project_id, idea_id)
        self._commit(collections, _IDEAS_AND_PROJECTS)
        return project

    def link_task_to_project(self, task_id: str, project_id: str) -> Task:
        """Point a task at a project, replacing any previous project reference."""
        logger.info("Linking task to project", task_id=task_id, project_id=project_id)
        collections = self.repository.load_collections()
        task = attach_task_to_project(collections, task_id, project_id)
        self._commit(collections, (EntityKind.TASK,))
        return task

    def link_task_to_idea(self, task_id: str, idea_id: str) -> Task:
        """Point a task at an idea, replacing any previous idea reference."""
        logger.info("Linking task to idea", task_id=task_id, idea_id=idea_id)
        collections = self.repository.load_collections()
        task = attach_task_to_idea(collections, task_id, idea_id)
        self._commit(collections, (EntityKind.TASK,))
        return task

    def unlink_task_from_project(self, task_id: str) -> Task:
        logger.info("Unlinking task from project", task_id=task_id)
        tasks = self.repository.load_all(EntityKind.TASK)
        task = Collections(tasks=tasks).find(EntityKind.TASK, task_id)  # type: ignore[arg-type]
        task.clear_project()
        self.repository.save_all(EntityKind.TASK, tasks)
        return task

    def unlink_task_from_idea(self, task_id: str) -> Task:
        logger.info("Unlinking task from idea", task_id=task_id)
        tasks = self.repository.load_all(EntityKind.TASK)
        task = Collections(tasks=tasks).find(EntityKind.TASK, task_id)  # type: ignore[arg-type]
        task.clear_idea()
        self.repository.save_all(EntityKind.TASK, tasks)
        return task

    def delete(self, kind: EntityKind, entity_id: str) -> Entity:
        """Delete an entity and clear references to it in every other collection.

        The delete and the cleanup are saved together; only changed collections are written.
        """
        logger.info("Deleting entity", kind=kind.value, entity_id=entity_id)
        collections = self.repository.load_collections()
        removed, touched = remove_with_cascade(collections, kind, entity_id)
        self._commit(collections, touched)
        logger.info("Entity deleted", kind=kind.value, entity_id=entity_id)
        return removed
