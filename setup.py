from setuptools import setup
import site, sys

site.ENABLE_USER_SITE = "--user" in sys.argv[1:]

setup(name='cldapping',
      version='1.0.0',
      description='cldapping sends a CLDAP ping to a domain controller and decodes the NETLOGON_SAM_LOGON_RESPONSE_EX it answers with.',
      packages=['cldapping',
                'cldapping.parser',
      ],
      license='MIT',
      install_requires=['dissect.cstruct>=2.0','frozendict','pwntools>=4.5.0','ldap3>=2.9','pyasn1>=0.4.8'],
      extras_require={
        'test': ['pytest'],
      },
      classifiers=[
        'Environment :: Console',
        'Intended Audience :: Information Technology',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Topic :: Security'
      ],
      entry_points= {
        'console_scripts': ['cldapping=cldapping:main']
      },
      python_requires='>=3.8'
)
