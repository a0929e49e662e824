"""Service to load projects from YAML files into database."""
import logging
from pathlib import Path

import yaml
from sqlalchemy.orm import Session

from gringotts.api.auth import get_api_key_hash, verify_api_key
from gringotts.config import Settings, check_secret_strength, get_settings
from gringotts.models.project import Project

logger = logging.getLogger(__name__)


def load_startup_projects(db: Session, settings: Settings | None = None) -> list[Project]:
    """Load configured projects, plus the bundled demo project in debug mode."""
    if settings is None:
        settings = get_settings()

    loaded_projects = load_projects(db, settings.projects_dir)
    if settings.debug:
        loaded_projects += load_projects(db, settings.demo_projects_dir, allow_weak_api_keys=True)
    return loaded_projects


def load_projects(
    db: Session,
    projects_dir: Path | None = None,
    allow_weak_api_keys: bool = False,
) -> list[Project]:
    """Load all projects from YAML files and upsert to database.

    Returns list of loaded/updated Project objects.
    """
    if projects_dir is None:
        projects_dir = get_settings().projects_dir
    if not projects_dir.exists():
        logger.warning(f"Projects directory not found: {projects_dir}")
        return []

    loaded_projects = []

    for yaml_file in sorted(projects_dir.glob("*.yaml")):
        try:
            project = _load_single_project(db, yaml_file, allow_weak_api_keys)
            if project:
                loaded_projects.append(project)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load project from {yaml_file}: {e}")

    db.commit()
    logger.info(f"Loaded {len(loaded_projects)} projects from {projects_dir}")
    return loaded_projects


def _load_single_project(db: Session, yaml_path: Path, allow_weak_api_keys: bool = False) -> Project | None:
    """Load a single project from YAML file."""
    with open(yaml_path, "r") as f:
        data = yaml.safe_load(f) or {}

    project_id = data.get("id")
    api_key = data.get("api_key")
    if not project_id or not api_key:
        logger.warning(f"Project config missing id or api_key: {yaml_path}")
        return None

    if not allow_weak_api_keys:
        try:
            check_secret_strength(str(api_key), "api_key")
        except ValueError as e:
            logger.error(f"Refusing project {project_id} from {yaml_path}: {e}")
            return None

    existing = db.query(Project).filter(Project.id == project_id).first()

    if existing:
        existing.name = data.get("name", existing.name)
        existing.webhook_url = data.get("webhook_url")
        existing.payment_provider = data.get("payment_provider", existing.payment_provider)
        if not verify_api_key(api_key, existing.api_key_hash):
            existing.api_key_hash = get_api_key_hash(api_key)
        logger.debug(f"Updated project: {project_id}")
        return existing

    project = Project(
        id=project_id,
        name=data.get("name", project_id),
        api_key_hash=get_api_key_hash(api_key),
        webhook_url=data.get("webhook_url"),
        payment_provider=data.get("payment_provider", "mock"),
    )
    db.add(project)
    logger.debug(f"Created project: {project_id}")
    return project
