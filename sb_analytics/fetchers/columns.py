"""Column names of the award and subaward relations.

Both the Fast and Canonical views expose exactly these columns.
"""

PIID = "award_id_piid"
AWARD_KEY = "award_key"
AGENCY = "awarding_agency_name"
SUB_AGENCY = "awarding_sub_agency_name"
OFFICE = "awarding_office_name"
NAICS = "naics_code"
NAICS_DESCRIPTION = "naics_description"
SET_ASIDE = "type_of_set_aside"
RECIPIENT_UEI = "recipient_uei"
RECIPIENT_NAME = "recipient_name"
OBLIGATED = "total_dollars_obligated_num"
CURRENT_VALUE = "current_total_value_of_award_num"
CEILING = "potential_total_value_of_award_num"
START_DATE = "pop_start_date"
END_DATE = "pop_current_end_date"
POTENTIAL_END_DATE = "pop_potential_end_date"
OFFERS = "number_of_offers_received"
EXTENT_COMPETED = "extent_competed"

# Scope level -> column holding that level's name
SCOPE_COLUMNS = {
    "sub_agency": SUB_AGENCY,
    "office": OFFICE,
    "agency": AGENCY,
}

# Projection aliased to Award field names
AWARD_SELECT = f"""
    {PIID} AS piid,
    {AWARD_KEY} AS award_key,
    {AGENCY} AS agency,
    {SUB_AGENCY} AS sub_agency,
    {OFFICE} AS office,
    {NAICS} AS naics,
    {NAICS_DESCRIPTION} AS naics_description,
    {SET_ASIDE} AS set_aside,
    {RECIPIENT_UEI} AS recipient_uei,
    {RECIPIENT_NAME} AS recipient_name,
    {OBLIGATED} AS obligated,
    {CURRENT_VALUE} AS current_value,
    {CEILING} AS ceiling,
    {START_DATE} AS pop_start,
    {END_DATE} AS pop_current_end,
    {POTENTIAL_END_DATE} AS pop_potential_end,
    {OFFERS} AS offers_received,
    {EXTENT_COMPETED} AS extent_competed
"""

# Awards starting inside the lookback window; expects a %(years)s parameter
LOOKBACK_CLAUSE = f"{START_DATE} >= (CURRENT_DATE - make_interval(years => %(years)s))"

# Subaward relation
SUB_PRIME_PIID = "prime_award_piid"
SUB_PRIME_KEY = "prime_award_unique_key"
SUB_NAME = "subawardee_name"
SUB_UEI = "subawardee_uei"
SUB_AMOUNT = "subaward_amount"
