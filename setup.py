"""
Packaging script for PyPI.
"""
import setuptools

setuptools.setup(
	name='hornet-datalog',
	version='0.1.0',
	packages=['hornet'],
	license='MIT',
	description='Constraint-based type inference and overload resolution for Datalog programs',
	long_description=open('README.md', encoding='utf-8').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.10",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Topic :: Software Development :: Compilers",
	],
	python_requires='>=3.10',
	install_requires=[
		"booze-tools>=0.6.2.1",
	],
	extras_require={
		"test": ["pytest"],
	},
)
