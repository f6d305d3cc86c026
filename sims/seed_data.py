"""Fixed data for seeding a development database."""

from datetime import date
from typing import List, NamedTuple, Tuple

from .domain import College, Course, Department, Program, Semester, Venue

COLLEGES = [
    College('01', 'College of Information and Communication Technology',
            'CoICT', 'Prof. Dr. Joseph Mkunda'),
    College('02', 'College of Business Education and Technology',
            'CoBET', 'Dr. Augustino Mwagike'),
    College('03', 'College of Engineering and Technology',
            'CoET', 'Prof. Dr. Richard Mcharo'),
    College('04', 'College of Earth Sciences',
            'CoES', 'Dr. Emmanuel Mutakyahwa'),
    College('05', 'College of Veterinary Medicine and Biomedical Sciences',
            'CoVMBS', 'Dr. Emmanuel Mellau'),
    College('06', 'College of Life Sciences and Bioengineering',
            'CoLSB', 'Dr. Ezekiel Mmbaga'),
    College('07', 'College of Social Sciences and Humanities',
            'CoSSH', 'Dr. Magreth Bushesha'),
]

DEPARTMENTS = [
    Department('CS', 'Computer Science and Engineering', '01',
               'Dr. Mussa Ally Dida'),
    Department('ICT', 'Information and Communication Technology', '01',
               'Dr. Devotha Nyambo'),
    Department('EE', 'Electronics and Telecommunications Engineering', '01',
               'Dr. Joseph Mbelwa'),
    Department('BAF', 'Business Administration and Finance', '02',
               'Dr. Honest Kimario'),
    Department('ACC', 'Accounting', '02', 'Mr. Japhet Mwemezi'),
    Department('ECO', 'Economics', '02', 'Dr. Honest Kimario'),
    Department('ME', 'Mechanical Engineering', '03', 'Dr. Isack Kamonde'),
    Department('CE', 'Civil Engineering', '03', 'Dr. Japhet Kashaigili'),
    Department('CHE', 'Chemical and Process Engineering', '03',
               'Dr. Yusufu Abeid Chande Jande'),
    Department('GEO', 'Geology', '04', 'Dr. Emmanuel Mutakyahwa'),
    Department('MIN', 'Mining and Mineral Processing Engineering', '04',
               'Dr. Simon Makundi'),
    Department('VET', 'Veterinary Medicine', '05', 'Dr. Emmanuel Mellau'),
    Department('BMS', 'Biomedical Sciences', '05', 'Dr. Fred Mfinanga'),
    Department('BIO', 'Biology', '06', 'Dr. Ezekiel Mmbaga'),
    Department('BCH', 'Biochemistry and Molecular Biology', '06',
               'Dr. Sylvester Leonard Lyantagaye'),
    Department('BE', 'Bioengineering', '06', 'Dr. Victor Mkupasi'),
    Department('ENG', 'English Language and Literature', '07',
               'Dr. Magreth Bushesha'),
    Department('SOC', 'Sociology and Anthropology', '07',
               'Dr. Felix Kumamoto'),
]

PROGRAMS = [
    Program('MB011', 'Bachelor of Science in Computer Science and'
            ' Engineering', 'CS', 'Bachelor', 8, 3, 1500000),
    Program('MM007', 'Master of Science in Computer Science', 'CS',
            'Masters', 9, 2, 2500000),
    Program('MB006', 'Bachelor of Science in Information and Communication'
            ' Technology', 'ICT', 'Bachelor', 8, 3, 1500000),
    Program('MD005', 'Diploma in Information Technology', 'ICT', 'Diploma',
            6, 2, 1000000),
    Program('MD010', 'Diploma in Computer Engineering', 'ICT', 'Diploma',
            6, 3, 1200000),
    Program('MB012', 'Bachelor of Science in Electronics and'
            ' Telecommunications Engineering', 'EE', 'Bachelor', 8, 3,
            1600000),
    Program('MB015', 'Bachelor of Business Administration', 'BAF',
            'Bachelor', 8, 3, 1400000),
    Program('MB016', 'Bachelor of Science in Finance', 'BAF', 'Bachelor',
            8, 3, 1400000),
    Program('MB017', 'Bachelor of Science in Accounting', 'ACC', 'Bachelor',
            8, 3, 1400000),
    Program('MB020', 'Bachelor of Science in Mechanical Engineering', 'ME',
            'Bachelor', 8, 3, 1600000),
    Program('MB021', 'Bachelor of Science in Civil Engineering', 'CE',
            'Bachelor', 8, 3, 1600000),
    Program('MB025', 'Bachelor of Science in Geology', 'GEO', 'Bachelor',
            8, 3, 1500000),
    Program('MB030', 'Doctor of Veterinary Medicine', 'VET', 'Bachelor',
            8, 5, 2000000),
    Program('MB035', 'Bachelor of Science in Biology', 'BIO', 'Bachelor',
            8, 3, 1400000),
    Program('MB040', 'Bachelor of Arts in English Language and Literature',
            'ENG', 'Bachelor', 8, 3, 1300000),
]

SEMESTERS = [
    Semester('2023/2024 - Semester I', '2023/2024', 1,
             date(2023, 10, 1), date(2024, 2, 28)),
    Semester('2023/2024 - Semester II', '2023/2024', 2,
             date(2024, 3, 1), date(2024, 8, 31)),
    Semester('2024/2025 - Semester I', '2024/2025', 1,
             date(2024, 10, 1), date(2025, 2, 28)),
    Semester('2024/2025 - Semester II', '2024/2025', 2,
             date(2025, 3, 1), date(2025, 8, 31), is_current=True),
]

VENUES = [
    Venue('CoICT Building', '101', 50, 'Classroom'),
    Venue('CoICT Building', '102', 100, 'Lecture Hall'),
    Venue('CoICT Building', 'Lab A', 30, 'Lab'),
    Venue('Main Building', '201', 80, 'Classroom'),
    Venue('Main Building', 'Auditorium', 300, 'Lecture Hall'),
    Venue('Engineering Block', 'E101', 60, 'Classroom'),
    Venue('Engineering Block', 'Workshop 1', 40, 'Lab'),
]


def _course(code: str, name: str, credits: int, level: int, department: str,
            description: str, *programs: str) -> Tuple[Course, List[str]]:
    return Course(code, name, credits, level, department, description), \
        list(programs)


COURSES = [
    _course('CS6201', 'System Software', 9, 200, 'CS',
            'Operating system concepts and system level programming.',
            'MD010'),
    _course('CS6202', 'Object Oriented Programming', 7, 200, 'CS',
            'Advanced object oriented principles using Java.',
            'MB011', 'MD010'),
    _course('CS6203', 'Data Communication', 6, 200, 'CS',
            'Computer networks and secure data transmission.',
            'MB011', 'MD010'),
    _course('CS6204', 'Advanced Electronics', 6, 200, 'EE',
            'Analog electronics and amplification techniques.', 'MD010'),
    _course('CS6205', 'Digital Electronics', 6, 200, 'EE',
            'Digital logic, combinational and sequential circuits.',
            'MD010'),
    _course('CS6206', 'System Analysis and Design', 6, 200, 'ICT',
            'Structured and object oriented system analysis methods.',
            'MB011', 'MB006', 'MD010'),
    _course('CS6207', 'Database System Design and Management', 6, 200, 'ICT',
            'Relational database theory and administration.',
            'MB011', 'MB006', 'MD010'),
    _course('CS6208', 'Introduction to Software Engineering', 6, 200, 'CS',
            'Software lifecycle, processes and documentation.',
            'MB011', 'MB006'),
    _course('CS6209', 'Field Practical Training II', 10, 200, 'ICT',
            'Industrial attachment focusing on ICT operations.', 'MD010'),
    _course('CS6210', 'Data Structure and File Handling', 9, 200, 'CS',
            'Algorithms, data structures and file systems.', 'MD010'),
    _course('CS6211', 'Basics of Telecommunication', 6, 200, 'EE',
            'Telecommunication technologies and standards.', 'MD010'),
    _course('CS6212', 'Website Design and Hosting', 9, 200, 'ICT',
            'Web technologies, hosting and security.', 'MD010'),
    _course('CS6213', 'Sequential Circuits', 6, 200, 'EE',
            'Design of sequential logic circuits.', 'MD010'),
    _course('CS6214', 'Microprocessor Technology', 6, 200, 'EE',
            'Microprocessor architecture and interfacing.',
            'MB011', 'MD010'),
    _course('CS6215', 'Information Management', 6, 200, 'ICT',
            'Information systems for organisations.', 'MB006', 'MB011'),
    _course('CS6216', 'Introduction to Embedded Systems', 6, 200, 'EE',
            'Embedded systems design and programming.', 'MB011', 'MD010'),
    _course('MS6227', 'Discrete Mathematics and Complex Numbers', 6, 200,
            'ICT', 'Discrete math concepts and complex analysis.',
            'MB011', 'MB006', 'MD010'),
    _course('CS6103', 'Programming Fundamentals', 6, 100, 'ICT',
            'Foundations of programming using Python.',
            'MB011', 'MB006', 'MD010'),
    _course('CS6104', 'Computer Systems', 6, 100, 'CS',
            'Introduction to computer architecture.', 'MB011', 'MD010'),
    _course('CS6105', 'Mathematics for Computing', 7, 100, 'ICT',
            'Calculus and algebra for computing.', 'MB011', 'MB006'),
    _course('CS6106', 'Professional Communication', 5, 100, 'ENG',
            'Communication skills for technical professionals.',
            'MB011', 'MB006', 'MD010', 'MB015'),
    _course('CS6301', 'Distributed Systems', 6, 300, 'CS',
            'Distributed architectures and microservices.', 'MB011'),
    _course('CS6302', 'Cloud Infrastructure', 6, 300, 'ICT',
            'Cloud platforms, deployment and operations.', 'MB011'),
    _course('CS6303', 'Machine Learning', 6, 300, 'CS',
            'Machine learning algorithms and applications.', 'MB011'),
    _course('BA6101', 'Principles of Accounting', 6, 100, 'ACC',
            'Financial accounting fundamentals.', 'MB015', 'MB017'),
    _course('BA6102', 'Business Mathematics', 6, 100, 'BAF',
            'Mathematics for business decision making.', 'MB015', 'MB016'),
    _course('BA6204', 'Corporate Finance', 6, 200, 'BAF',
            'Working capital management and capital budgeting.', 'MB015'),
    _course('BA6205', 'Investment Analysis', 6, 200, 'BAF',
            'Portfolio theory and security valuation.', 'MB015'),
    _course('BA6306', 'International Business', 6, 300, 'BAF',
            'Global trade environment and strategies.', 'MB015'),
    _course('ACC6201', 'Intermediate Accounting', 7, 200, 'ACC',
            'Financial reporting and standards.', 'MB017'),
    _course('ACC6202', 'Taxation Principles', 6, 200, 'ACC',
            'Income tax computations and planning.', 'MB017'),
    _course('ME6102', 'Engineering Mechanics', 6, 100, 'ME',
            'Statics and dynamics for engineers.', 'MB020'),
    _course('ME6204', 'Thermodynamics', 6, 200, 'ME',
            'Thermodynamic systems and cycles.', 'MB020'),
    _course('ME6306', 'Machine Design', 6, 300, 'ME',
            'Design and analysis of mechanical systems.', 'MB020'),
    _course('CE6101', 'Engineering Drawing', 6, 100, 'CE',
            'Technical drawing for civil engineers.', 'MB021'),
    _course('CE6203', 'Structural Analysis', 6, 200, 'CE',
            'Analysis of structures and loads.', 'MB021'),
    _course('CE6304', 'Transportation Engineering', 6, 300, 'CE',
            'Planning and design of transportation systems.', 'MB021'),
    _course('BIO6201', 'Molecular Biology', 6, 200, 'BIO',
            'Cellular and molecular processes.', 'MB035'),
    _course('BIO6303', 'Bioprocess Engineering', 6, 300, 'BIO',
            'Bioprocess design and optimisation.', 'MB035'),
    _course('ENG6105', 'Academic Writing', 6, 100, 'ENG',
            'Academic writing and research skills.', 'MB040'),
    _course('ENG6202', 'African Literature', 6, 200, 'ENG',
            'Study of African literary works.', 'MB040'),
    _course('ENG6304', 'Language and Society', 6, 300, 'ENG',
            'Sociolinguistics and discourse analysis.', 'MB040'),
]


class Lecturer(NamedTuple):
    email: str
    first_name: str
    middle_name: str
    last_name: str
    staff_id: str
    department_code: str
    rank: str
    specialization: str


LECTURERS = [
    Lecturer('joseph.mkunda@must.ac.tz', 'Joseph', 'T', 'Mkunda',
             'MUST-F-001', 'CS', 'Professor', 'Computer Networks'),
    Lecturer('devotha.nyambo@must.ac.tz', 'Devotha', 'G', 'Nyambo',
             'MUST-F-002', 'CS', 'Senior Lecturer', 'Software Engineering'),
    Lecturer('mussa.dida@must.ac.tz', 'Mussa', 'Ally', 'Dida',
             'MUST-F-003', 'CS', 'Lecturer', 'Artificial Intelligence'),
    Lecturer('rehema.mdee@must.ac.tz', 'Rehema', 'J', 'Mdee',
             'MUST-F-012', 'ICT', 'Assistant Lecturer', 'Database Systems'),
    Lecturer('hellen.komba@must.ac.tz', 'Hellen', 'S', 'Komba',
             'MUST-F-014', 'EE', 'Senior Lecturer', 'Telecommunications'),
    Lecturer('flavian.kweka@must.ac.tz', 'Flavian', 'M', 'Kweka',
             'MUST-F-016', 'BAF', 'Lecturer', 'Corporate Finance'),
    Lecturer('john.muro@must.ac.tz', 'John', 'L', 'Muro',
             'MUST-F-018', 'ME', 'Senior Lecturer', 'Thermodynamics'),
]
"""Teaching staff. Courses are assigned within a department where possible."""

LECTURE_DAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday']
LECTURE_SLOTS = [('08:00', '10:00'), ('10:00', '12:00'), ('14:00', '16:00'),
                 ('16:00', '18:00')]

FIRST_NAMES = ['Asha', 'Erick', 'Neema', 'Juma', 'Maria', 'Kelvin', 'Gloria',
               'Samuel', 'Linda', 'Abel', 'Diana', 'Peter', 'Joyce', 'Elias',
               'Rebecca', 'Baraka', 'Agnes', 'Felix', 'Zainab', 'Daniel']
MIDDLE_NAMES = ['Ally', 'Joseph', 'Grace', 'Moses', 'Innocent', 'Jackson',
                'Gabriel', 'Salim', 'Paul', 'Ibrahim', 'Hassan', 'Amos']
LAST_NAMES = ['Lubere', 'Mushi', 'Mwakabungu', 'Ngwale', 'Shayo', 'Mmbaga',
              'Katambala', 'Mhando', 'Mkude', 'Kaaya', 'Mgaya', 'Nyoni',
              'Kavishe', 'Mchome', 'Mrema', 'Komba', 'Msuya', 'Chacha']
ENROLLMENT_STATUSES = ['active', 'probation', 'suspended']
PAYMENT_STATUSES = ['paid', 'partial', 'pending']
