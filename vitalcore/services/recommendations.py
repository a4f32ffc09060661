"""Recommendation sentences keyed by (metric, trend direction)."""

from vitalcore.domain.models import TrendDirection

INCREASING = TrendDirection.INCREASING
DECREASING = TrendDirection.DECREASING
STABLE = TrendDirection.STABLE
FLUCTUATING = TrendDirection.FLUCTUATING

GENERIC_RECOMMENDATION = (
    "Continue monitoring this test regularly and consult a healthcare provider "
    "if you have concerns about your results."
)

INSUFFICIENT_DATA_RECOMMENDATION = (
    "Insufficient data for trend analysis: at least {min_points} readings are needed. "
    "Keep recording results to build a reliable trend."
)

RECOMMENDATIONS: dict[tuple[str, TrendDirection], str] = {
    ("HEART_RATE", INCREASING): (
        "Your resting heart rate is rising. Review sleep, stress and caffeine intake, "
        "and consult a healthcare provider if it stays elevated."
    ),
    ("HEART_RATE", DECREASING): (
        "Your resting heart rate is falling, which often reflects improving fitness. "
        "Seek advice if you feel dizzy or fatigued."
    ),
    ("HEART_RATE", STABLE): "Your resting heart rate is steady. Keep up your current activity level.",
    ("HEART_RATE", FLUCTUATING): (
        "Your heart rate varies between readings. Measure at the same time of day, at rest."
    ),
    ("BLOOD_PRESSURE_SYSTOLIC", INCREASING): (
        "Systolic pressure is trending up. Reduce sodium, stay active and discuss the "
        "trend with a healthcare provider."
    ),
    ("BLOOD_PRESSURE_SYSTOLIC", DECREASING): (
        "Systolic pressure is trending down. Continue your current habits and watch for "
        "lightheadedness."
    ),
    ("BLOOD_PRESSURE_SYSTOLIC", STABLE): "Systolic pressure is stable. Keep monitoring regularly.",
    ("BLOOD_PRESSURE_SYSTOLIC", FLUCTUATING): (
        "Systolic readings vary. Measure seated after five minutes of rest for consistency."
    ),
    ("BLOOD_PRESSURE_DIASTOLIC", INCREASING): (
        "Diastolic pressure is trending up. Limit alcohol and sodium and review the trend "
        "with a healthcare provider."
    ),
    ("BLOOD_PRESSURE_DIASTOLIC", DECREASING): (
        "Diastolic pressure is trending down. Continue your current habits."
    ),
    ("BLOOD_PRESSURE_DIASTOLIC", STABLE): "Diastolic pressure is stable. Keep monitoring regularly.",
    ("BLOOD_PRESSURE_DIASTOLIC", FLUCTUATING): (
        "Diastolic readings vary. Use the same arm and posture for each measurement."
    ),
    ("OXYGEN_SATURATION", INCREASING): "Oxygen saturation is improving. Keep up your current routine.",
    ("OXYGEN_SATURATION", DECREASING): (
        "Oxygen saturation is declining. Seek medical advice promptly if readings fall below 92%."
    ),
    ("OXYGEN_SATURATION", STABLE): "Oxygen saturation is stable.",
    ("OXYGEN_SATURATION", FLUCTUATING): (
        "Oxygen readings vary. Keep the sensor still and your hands warm while measuring."
    ),
    ("BODY_TEMPERATURE", INCREASING): (
        "Body temperature is rising. Rest, stay hydrated and consult a healthcare provider "
        "if a fever persists."
    ),
    ("BODY_TEMPERATURE", DECREASING): (
        "Body temperature is falling. Keep warm and seek advice if it drops below 95°F."
    ),
    ("BODY_TEMPERATURE", STABLE): "Body temperature is stable.",
    ("BODY_TEMPERATURE", FLUCTUATING): (
        "Temperature readings vary. Measure at the same site and time of day."
    ),
    ("RESPIRATORY_RATE", INCREASING): (
        "Your breathing rate is rising. Consult a healthcare provider if you feel short of breath."
    ),
    ("RESPIRATORY_RATE", DECREASING): "Your breathing rate is falling. Continue monitoring.",
    ("RESPIRATORY_RATE", STABLE): "Your breathing rate is stable.",
    ("RESPIRATORY_RATE", FLUCTUATING): "Your breathing rate varies. Measure while fully at rest.",
    ("HEART_RATE_VARIABILITY", INCREASING): (
        "Heart rate variability is improving, a sign of good recovery. Keep prioritizing sleep."
    ),
    ("HEART_RATE_VARIABILITY", DECREASING): (
        "Heart rate variability is declining. Allow more recovery time and manage stress."
    ),
    ("HEART_RATE_VARIABILITY", STABLE): "Heart rate variability is stable.",
    ("HEART_RATE_VARIABILITY", FLUCTUATING): (
        "Heart rate variability swings between readings. Measure on waking for consistency."
    ),
    ("GLUCOSE", INCREASING): (
        "Blood sugar is trending up. Monitor it regularly and consider dietary changes and "
        "exercise to maintain healthy levels."
    ),
    ("GLUCOSE", DECREASING): (
        "Blood sugar is trending down. Keep your current habits and watch for signs of low "
        "blood sugar."
    ),
    ("GLUCOSE", STABLE): "Blood sugar is stable. Continue monitoring it regularly.",
    ("GLUCOSE", FLUCTUATING): (
        "Blood sugar varies between tests. Test fasting at the same time of day."
    ),
    ("HBA1C", INCREASING): (
        "Your HbA1c is rising, meaning average blood sugar is climbing. Discuss diet, activity "
        "and follow-up testing with a healthcare provider."
    ),
    ("HBA1C", DECREASING): "Your HbA1c is falling. Continue your current management plan.",
    ("HBA1C", STABLE): "Your HbA1c is stable. Recheck as your provider recommends.",
    ("HBA1C", FLUCTUATING): "Your HbA1c is shifting between tests. Keep a consistent routine.",
    ("LDL", INCREASING): (
        "LDL is rising. Focus on a heart-healthy diet and exercise, reducing saturated fats "
        "and increasing fiber."
    ),
    ("LDL", DECREASING): "LDL is falling. Keep up your heart-healthy habits.",
    ("LDL", STABLE): "LDL is stable. Continue a heart-healthy diet.",
    ("LDL", FLUCTUATING): "LDL varies between tests. Test under consistent fasting conditions.",
    ("HDL", INCREASING): (
        "HDL is rising. Continue regular exercise and healthy fats in your diet."
    ),
    ("HDL", DECREASING): (
        "HDL is falling. Increase aerobic activity and favor unsaturated fats."
    ),
    ("HDL", STABLE): "HDL is stable. Continue regular exercise.",
    ("HDL", FLUCTUATING): "HDL varies between tests. Keep your routine consistent before testing.",
    ("TOTAL_CHOLESTEROL", INCREASING): (
        "Total cholesterol is rising. Limit saturated fat and discuss lipid management with "
        "a healthcare provider."
    ),
    ("TOTAL_CHOLESTEROL", DECREASING): "Total cholesterol is falling. Keep up your current habits.",
    ("TOTAL_CHOLESTEROL", STABLE): "Total cholesterol is stable.",
    ("TOTAL_CHOLESTEROL", FLUCTUATING): (
        "Total cholesterol varies between tests. Test under consistent conditions."
    ),
    ("TRIGLYCERIDES", INCREASING): (
        "Triglycerides are rising. Reduce sugar, refined carbohydrates and alcohol."
    ),
    ("TRIGLYCERIDES", DECREASING): "Triglycerides are falling. Keep up your current habits.",
    ("TRIGLYCERIDES", STABLE): "Triglycerides are stable.",
    ("TRIGLYCERIDES", FLUCTUATING): (
        "Triglycerides vary between tests. Fast for 9 to 12 hours before each test."
    ),
    ("EGFR", INCREASING): "Kidney filtration is improving. Stay hydrated and keep monitoring.",
    ("EGFR", DECREASING): (
        "Kidney filtration is declining. Stay hydrated, review medications and discuss kidney "
        "function with a healthcare provider."
    ),
    ("EGFR", STABLE): "Kidney filtration is stable.",
    ("EGFR", FLUCTUATING): "Kidney filtration varies between tests. Keep hydration consistent.",
    ("CREATININE", INCREASING): (
        "Creatinine is rising. Monitor kidney function, stay hydrated and maintain a balanced "
        "diet low in processed foods."
    ),
    ("CREATININE", DECREASING): "Creatinine is falling. Continue monitoring kidney function.",
    ("CREATININE", STABLE): "Creatinine is stable. Continue monitoring kidney function.",
    ("CREATININE", FLUCTUATING): (
        "Creatinine varies between tests. Stay consistently hydrated before testing."
    ),
    ("WBC", INCREASING): (
        "Your white blood cell count is rising. This can follow an infection; recheck if it "
        "remains high."
    ),
    ("WBC", DECREASING): (
        "Your white blood cell count is falling. Continue good hygiene and immune-supporting "
        "practices."
    ),
    ("WBC", STABLE): (
        "Your white blood cell count is stable. Continue good hygiene and immune-supporting "
        "practices."
    ),
    ("WBC", FLUCTUATING): "Your white blood cell count varies between tests. Continue monitoring.",
    ("HGB", INCREASING): "Hemoglobin is rising. Stay hydrated and continue monitoring.",
    ("HGB", DECREASING): (
        "Hemoglobin is falling. Include iron-rich foods and discuss the trend with a "
        "healthcare provider."
    ),
    ("HGB", STABLE): (
        "Hemoglobin is stable. Continue with iron-rich foods and regular exercise."
    ),
    ("HGB", FLUCTUATING): "Hemoglobin varies between tests. Continue monitoring.",
}


def recommendation_for(metric: str, direction: TrendDirection) -> str:
    """Look up the sentence for a metric and direction, falling back to a generic one."""
    return RECOMMENDATIONS.get((metric, direction), GENERIC_RECOMMENDATION)


def insufficient_data_recommendation(min_points: int) -> str:
    return INSUFFICIENT_DATA_RECOMMENDATION.format(min_points=min_points)
