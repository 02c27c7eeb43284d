
EXTRACTION_PROMPT = """You are a data-entry assistant for a personal fitness log.

Your job is to convert a screenshot from a fitness-tracking app (Apple Health, Strava, Garmin, Google Fit, ...)
into one structured activity record.

EXTRACTION RULES:

1. **ACTIVITY:** Identify the main activity type: Walking, Running, Swimming, Cycling, Strength, Yoga, or Steps.
2. **STEPS FIRST:** If a step count (e.g., '5,432 steps') is visible, prioritize it and report the activity as Steps.
3. **WORKOUTS:** For a workout session (run, ride, swim, ...), use the primary duration (e.g., 45:12) or distance (e.g., 5.2 km) as the main value.
4. **DURATIONS:** If the main value is a clock duration like '45:12' or '1:05:30', convert it to decimal minutes
   for primaryValue (45:12 -> 45.2) and keep a readable unit such as 'minutes' or 'hh:mm:ss'.
5. **SECONDARY STATS:** Put every other visible metric (calories, heart rate, pace, elevation, ...) into additionalStats
   as label/value pairs, copying the value text as displayed (e.g., label 'Calories', value '320 kcal').
6. **SUMMARY:** Write a one-sentence recap of the activity.
7. **CONFIDENCE:** Report how confident you are in the extraction as a number from 0 to 1.

Return strictly valid JSON matching the response schema. No prose, comments, or Markdown fences.
"""

RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "activityType": {
            "type": "string",
            "description": "One of: Walking, Running, Swimming, Cycling, Strength, Yoga, Steps, Other",
        },
        "primaryValue": {
            "type": "number",
            "description": "The main numeric value (e.g., 5432 for steps, 5.2 for distance)",
        },
        "unit": {
            "type": "string",
            "description": "The unit of the primary value (e.g., steps, km, miles, minutes)",
        },
        "additionalStats": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "label": {"type": "string"},
                    "value": {"type": "string"},
                },
                "required": ["label", "value"],
            },
        },
        "summary": {
            "type": "string",
            "description": "A 1-sentence recap of the activity",
        },
        "confidence": {
            "type": "number",
            "description": "Confidence score from 0 to 1",
        },
    },
    "required": ["activityType", "primaryValue", "unit", "summary"],
}
