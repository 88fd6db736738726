from .lees_v_lees import LEES_V_LEES

CASE_PROFILES = {
    "lees_v_lees": LEES_V_LEES,
}
