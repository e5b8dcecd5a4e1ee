"""
Choices offered by the partner application form.
"""

EXPERIENCE_OPTIONS = ["1-2 years", "3-5 years", "6-10 years", "11-15 years", "15+ years"]

COMPANY_TYPES = [
    "Private Limited",
    "Public Limited",
    "Partnership",
    "Proprietorship",
    "LLP",
    "NGO",
]

STATES = [
    "Andhra Pradesh", "Arunachal Pradesh", "Assam", "Bihar", "Chhattisgarh", "Delhi", "Goa", "Gujarat",
    "Haryana", "Himachal Pradesh", "Jharkhand", "Karnataka", "Kerala", "Madhya Pradesh", "Maharashtra",
    "Manipur", "Meghalaya", "Mizoram", "Nagaland", "Odisha", "Punjab", "Rajasthan", "Sikkim",
    "Tamil Nadu", "Telangana", "Tripura", "Uttar Pradesh", "Uttarakhand", "West Bengal",
]

SPECIALIZATION_OPTIONS = [
    "MBBS Admissions", "Medical Counseling", "Visa Assistance", "International Admissions",
    "Student Support", "Career Guidance", "NEET Coaching", "Abroad Studies", "Scholarship Guidance",
    "University Partnerships", "Student Mentoring", "Documentation", "Pre-departure Support",
]

SERVICES_OPTIONS = [
    "Admission Counseling", "Visa Processing", "Accommodation Assistance", "Travel Arrangements",
    "Document Verification", "Scholarship Guidance", "Career Counseling", "Test Preparation",
    "University Selection", "Application Processing", "Financial Planning", "Post-arrival Support",
]

CURRENT_STUDENTS_OPTIONS = ["1-50", "51-100", "101-250", "251-500", "500+"]

TEAM_SIZE_OPTIONS = ["1-5", "6-10", "11-25", "26-50", "50+"]

ANNUAL_REVENUE_OPTIONS = [
    "Under 10 Lakhs",
    "10-25 Lakhs",
    "25-50 Lakhs",
    "50 Lakhs - 1 Crore",
    "1-5 Crores",
    "5+ Crores",
]

PARTNERSHIP_TYPES = [
    "Authorized Representative",
    "Regional Partner",
    "Referral Partner",
    "Franchise Partner",
]

EXPECTED_STUDENTS_OPTIONS = ["10-25", "26-50", "51-100", "100+"]

MARKETING_BUDGET_OPTIONS = ["Under 1 Lakh", "1-5 Lakhs", "5-10 Lakhs", "10+ Lakhs"]
