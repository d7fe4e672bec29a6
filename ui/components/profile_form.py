import streamlit as st
from typing import Dict, Any, Optional

from domain.constants import (AVAILABILITY_OPTIONS, EVENT_FILTER_TYPES,
                              ORGANIZATION_CATEGORIES, ORGANIZATION_LOCATIONS)
from services.api import ValidationError
from services.profiles import split_list, validate_profile_setup


def render(profile: Dict[str, Any], user_type: str, key_prefix: str,
           is_new: bool = False) -> Optional[Dict[str, Any]]:
    """
    Renders the profile form used by both profile setup and profile editing.

    Args:
        profile (Dict[str, Any]): Current profile values used as defaults.
        user_type (str): VOLUNTEER or ORGANIZATION; decides which fields appear.
        key_prefix (str): A unique prefix for Streamlit widget keys.
        is_new (bool): Flag to adjust labels for the setup context.

    Returns:
        Dict[str, Any]: The submitted form values, or None if not submitted or invalid.
    """
    with st.form(f"form_{key_prefix}"):
        st.subheader("Tell us about yourself" if is_new else "Basic information")
        data: Dict[str, Any] = {}

        if user_type == 'VOLUNTEER':
            c1, c2 = st.columns(2)
            data['firstName'] = c1.text_input("First name", value=profile.get('firstName') or '',
                                              key=f"{key_prefix}_first")
            data['lastName'] = c2.text_input("Last name", value=profile.get('lastName') or '',
                                             key=f"{key_prefix}_last")
        else:
            data['organizationName'] = st.text_input(
                "Organization name", value=profile.get('organizationName') or '', key=f"{key_prefix}_org")

        data['bio'] = st.text_area("About", value=profile.get('bio') or profile.get('description') or '',
                                   key=f"{key_prefix}_bio")
        data['location'] = st.text_input("Location", value=profile.get('location') or '',
                                         key=f"{key_prefix}_location")
        data['phoneNumber'] = st.text_input("Phone", value=profile.get('phoneNumber') or '',
                                            key=f"{key_prefix}_phone")

        if user_type == 'VOLUNTEER':
            current = split_list(profile.get('interests'))
            data['interests'] = st.multiselect(
                "Interests & causes", EVENT_FILTER_TYPES,
                default=[i for i in current if i in EVENT_FILTER_TYPES], key=f"{key_prefix}_interests")
            data['skills'] = st.text_input("Skills (comma separated)",
                                           value=profile.get('skills') or '', key=f"{key_prefix}_skills")
            availability = profile.get('availability') or 'flexible'
            idx = AVAILABILITY_OPTIONS.index(availability) if availability in AVAILABILITY_OPTIONS else 0
            data['availability'] = st.selectbox("Availability", AVAILABILITY_OPTIONS, index=idx,
                                                key=f"{key_prefix}_availability")
        else:
            data['description'] = data['bio']
            data['missionStatement'] = st.text_area(
                "Mission statement", value=profile.get('missionStatement') or '', key=f"{key_prefix}_mission")
            data['website'] = st.text_input("Website", value=profile.get('website') or '',
                                            key=f"{key_prefix}_website")
            c1, c2 = st.columns(2)
            data['city'] = c1.text_input("City", value=profile.get('city') or '', key=f"{key_prefix}_city")
            country = profile.get('country')
            idx = ORGANIZATION_LOCATIONS.index(country) if country in ORGANIZATION_LOCATIONS else 0
            data['country'] = c2.selectbox("Country", ORGANIZATION_LOCATIONS, index=idx,
                                           key=f"{key_prefix}_country")
            current = split_list(profile.get('categories'))
            data['categories'] = st.multiselect(
                "Focus areas", ORGANIZATION_CATEGORIES,
                default=[c for c in current if c in ORGANIZATION_CATEGORIES], key=f"{key_prefix}_categories")
            data['primaryCategory'] = data['categories'][0] if data['categories'] else ''
            data['employeeCount'] = st.number_input(
                "Employees", min_value=0, value=int(profile.get('employeeCount') or 0),
                key=f"{key_prefix}_employees")

        submitted = st.form_submit_button("Complete profile" if is_new else "Save")

    if not submitted:
        return None
    try:
        validate_profile_setup(data, user_type)
    except ValidationError as e:
        st.error(str(e))
        return None
    return data
