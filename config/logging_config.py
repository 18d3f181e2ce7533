"""
Configuration du logging de l'application.

Le niveau global vient de MEDVIEW_LOG_LEVEL. Les décodeurs (NRRD, NIfTI, STL)
journalisent chaque en-tête lu : ils ont leur propre niveau, WARNING par
défaut, réglable via MEDVIEW_DECODER_LOG_LEVEL.
"""
import logging
import os
from typing import Dict, Optional

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_LEVEL_ENV = 'MEDVIEW_LOG_LEVEL'
DECODER_LOG_LEVEL_ENV = 'MEDVIEW_DECODER_LOG_LEVEL'

# Loggers des décodeurs de fichiers et leur niveau par défaut
DECODER_LOGGERS: Dict[str, str] = {
    'services.nrrd_decoder': 'WARNING',
    'services.nifti_decoder': 'WARNING',
    'services.stl_decoder': 'WARNING',
}


def _to_level(name: str, default: int = logging.INFO) -> int:
    return getattr(logging, str(name).strip().upper(), default)


def resolve_log_level(default: str = 'INFO') -> str:
    """Retourne le niveau de log demandé via MEDVIEW_LOG_LEVEL, sinon `default`."""
    return os.environ.get(LOG_LEVEL_ENV, default).strip() or default


def resolve_module_levels() -> Dict[str, str]:
    """Niveaux des loggers décodeurs, surchargés en bloc par MEDVIEW_DECODER_LOG_LEVEL."""
    override = os.environ.get(DECODER_LOG_LEVEL_ENV, '').strip()
    if not override:
        return dict(DECODER_LOGGERS)
    return {name: override for name in DECODER_LOGGERS}


def configure_logging(
    log_level: str = 'INFO',
    log_file: Optional[str] = None,
    module_levels: Optional[Dict[str, str]] = None,
) -> None:
    """
    Configure le logger racine puis les niveaux propres à certains modules.

    Args:
        log_level: Niveau de log global (DEBUG, INFO, WARNING, ERROR)
        log_file: Chemin vers le fichier de log (optionnel)
        module_levels: {nom de logger: niveau}; DECODER_LOGGERS si None
    """
    level = _to_level(log_level)
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    if module_levels is None:
        module_levels = DECODER_LOGGERS
    for name, module_level in module_levels.items():
        logging.getLogger(name).setLevel(_to_level(module_level, level))
