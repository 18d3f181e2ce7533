"""
Fonctions utilitaires.
"""


def clamp(value, minimum, maximum):
    """
    Borne une valeur dans l'intervalle [minimum, maximum].

    Args:
        value: Valeur à borner
        minimum: Borne inférieure
        maximum: Borne supérieure

    Returns:
        Valeur bornée
    """
    return max(minimum, min(maximum, value))


def format_bytes(num_bytes):
    """
    Formate une taille en octets pour les logs ("1.5 KB", "12 MB").

    Args:
        num_bytes: Taille en octets

    Returns:
        str: Taille lisible
    """
    if num_bytes == 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    size = float(num_bytes)
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{round(size, 2):g} {units[index]}"
